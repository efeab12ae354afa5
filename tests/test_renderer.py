"""Tests for the console renderer."""

import io

import pytest

from active_status.exceptions import RenderFailure
from active_status.output import OutputSink
from active_status.renderer import ConsoleRenderer, format_job_line, job_style
from active_status.types import Job, JobStatus, Progress


def make_renderer(capabilities, sink, **kwargs) -> ConsoleRenderer:
    return ConsoleRenderer(capabilities, sink, clock=lambda: 10.0, **kwargs)


def sequence(line: int, text: str) -> str:
    return f"<civis><sc><cuu {line}><hpa 0><el>{text}<rc><cnorm>"


class TestJobStyle:
    def test_active_is_bold(self):
        style = job_style(Job(id=1, line=1, active=True))
        assert style.bold and not style.italic

    def test_completed_and_dimmed_is_italic(self):
        style = job_style(Job(id=1, line=1, complete=True))
        assert style.italic and not style.bold

    @pytest.mark.parametrize(
        "status,color",
        [(JobStatus.SUCCESS, "green"), (JobStatus.WARNING, "yellow"), (JobStatus.ERROR, "red")],
    )
    def test_status_colors(self, status, color):
        assert job_style(Job(id=1, line=1, status=status)).color.name == color

    def test_normal_has_no_color(self):
        assert job_style(Job(id=1, line=1)).color is None


class TestFormatJobLine:
    def test_plain_job_has_no_escapes(self):
        job = Job(id=1, line=1, prefix="db: ", summary="idle")
        assert format_job_line(job, now=0.0) == "db: idle"

    def test_active_success_job(self):
        job = Job(id=1, line=1, summary="ok", status=JobStatus.SUCCESS, active=True)
        assert format_job_line(job, now=0.0) == "\x1b[1;32mok\x1b[0m"

    def test_progress_uses_formatter(self):
        job = Job(
            id=1,
            line=1,
            summary="load",
            progress=Progress(current=1, target=2, created=0.0),
        )
        text = format_job_line(job, now=1.0, progress_formatter=lambda p, now: f" [{p.current}]")
        assert text == "load [1]"

    def test_job_formatter_overrides_default(self):
        job = Job(
            id=1,
            line=1,
            progress=Progress(current=1, target=2, created=0.0),
            progress_formatter=lambda p, now: "mine",
        )
        assert format_job_line(job, now=1.0, progress_formatter=lambda p, now: "default") == "mine"

    def test_progress_segment_is_not_italic(self):
        job = Job(
            id=1,
            line=1,
            summary="done",
            complete=True,
            progress=Progress(current=2, target=2, created=0.0),
        )
        text = format_job_line(job, now=1.0, progress_formatter=lambda p, now: " bar")
        assert text == "\x1b[3mdone\x1b[0m bar"


class TestConsoleRenderer:
    def test_add_row_prints_newline(self, capabilities, sink, output):
        make_renderer(capabilities, sink).add_row()
        assert output.getvalue() == "\n"

    def test_renders_new_job(self, capabilities, sink, output):
        renderer = make_renderer(capabilities, sink)
        job = Job(id=1, line=2, summary="hi")
        assert renderer.render({}, {1: job}) == []
        assert output.getvalue() == sequence(2, "hi")

    def test_skips_unchanged_jobs(self, capabilities, sink, output):
        renderer = make_renderer(capabilities, sink)
        a = Job(id=1, line=2, summary="a")
        b = Job(id=2, line=1, summary="b")
        b2 = Job(id=2, line=1, summary="b2")
        renderer.render({1: a, 2: b}, {1: a, 2: b2})
        assert output.getvalue() == sequence(1, "b2")

    def test_renders_top_line_first(self, capabilities, sink, output):
        renderer = make_renderer(capabilities, sink)
        jobs = {
            1: Job(id=1, line=1, summary="low"),
            2: Job(id=2, line=3, summary="high"),
            3: Job(id=3, line=2, summary="mid"),
        }
        renderer.render({}, jobs)
        assert output.getvalue() == (
            sequence(3, "high") + sequence(2, "mid") + sequence(1, "low")
        )

    def test_formatter_failure_is_isolated(self, capabilities, sink, output):
        """A failing progress formatter costs only its own job's line."""

        def broken(progress, now):
            raise ZeroDivisionError("boom")

        renderer = make_renderer(capabilities, sink)
        jobs = {
            1: Job(
                id=1,
                line=2,
                progress=Progress(current=1, target=1, created=0.0),
                progress_formatter=broken,
            ),
            2: Job(id=2, line=1, summary="fine"),
        }
        failures = renderer.render({}, jobs)

        assert [f.job_id for f in failures] == [1]
        assert isinstance(failures[0].__cause__, ZeroDivisionError)
        assert output.getvalue() == sequence(1, "fine")

    def test_write_failure_becomes_render_failure(self, capabilities):
        class BrokenStream(io.StringIO):
            def write(self, text):
                raise OSError("terminal gone")

        renderer = make_renderer(capabilities, OutputSink(BrokenStream()))
        failures = renderer.render({}, {1: Job(id=1, line=1, summary="x")})
        assert len(failures) == 1
        assert isinstance(failures[0], RenderFailure)
        assert "terminal gone" in str(failures[0])
