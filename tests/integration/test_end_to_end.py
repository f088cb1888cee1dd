"""End-to-end stepper runs through the public ``stepwise`` API."""

import json

import stepwise
from stepwise import Stepper, StepEvent, configure_logging, step


class TestSharedContextRun:
    def test_three_steps_build_on_shared_state(self):
        ctx = {"x": 0}
        stepper = Stepper(
            ctx,
            step("A", lambda c: c.update(x=1)),
            step("B", lambda c: c.update(x=c["x"] + 1)),
            step("C", lambda c: c.update(x=c["x"] + 1)),
        )

        result = stepper.run()

        assert len(result.data) == 3
        assert result.has_errors is False
        assert ctx["x"] == 3

    def test_appended_step_appears_once_after_reset(self):
        ctx = {"x": 0}
        stepper = Stepper(ctx, step("A", lambda c: c.update(x=1)))
        stepper.run()

        late = step("D", lambda c: c.update(done=True))
        stepper.steps.append(late)
        stepper.reset()
        result = stepper.run()

        names = [d.step.name for d in result.data]
        assert names == ["A", "D"]
        assert ctx == {"x": 1, "done": True}


class TestApplicationStartup:
    """A host app wiring its startup sequence through a stepper."""

    class App:
        def __init__(self):
            self.port = None
            self.serving = False
            self.failures = []

        def compute_ports(self):
            self.port = 8080

        def serve(self):
            if self.port is None:
                raise RuntimeError("no port")
            self.serving = True

    def test_startup_with_failure_reporting(self, capsys):
        configure_logging(level="DEBUG", json_format=True)
        app = self.App()
        stepper = Stepper(
            app,
            step("Calculate the ports", lambda a, owner: owner.compute_ports()),
            step("Migrate database", lambda a: 1 / 0),
            step("Start the HTTP server", lambda a: a.serve()),
        )
        stepper.on(StepEvent.FAILED, lambda error, s, data: app.failures.append(s.name))

        result = stepper.run(alt_owner=app)

        assert app.serving is True
        assert app.failures == ["Migrate database"]
        assert result.failed_steps == ["Migrate database"]
        assert isinstance(result.errors[0], ZeroDivisionError)

        entries = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.strip()]
        failed = [e for e in entries if e["event"] == "step_failed"]
        assert failed[0]["step"] == "Migrate database"
        assert failed[0]["step_index"] == 1
        run_ids = {e["run_id"] for e in entries if "run_id" in e}
        assert len(run_ids) == 1

    def test_result_serializes_to_json(self):
        result = Stepper(None, step("ok"), step("skip", None, {"guard": lambda: False})).run()
        payload = json.dumps(result.to_dict())
        assert '"skipped"' in payload


def test_package_exports():
    assert stepwise.__version__ == "0.1.0"
    assert stepwise.Stepper is Stepper
