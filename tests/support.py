"""Shared test doubles and builders."""

from darkpool_kernel.exceptions import DispatchError

from darkpool_batch.domain.types import TargetResponse


class FakeTargetClient:
    """Target client double.

    ``responses`` maps an endpoint to a TargetResponse or to an exception
    instance to raise.  Unlisted endpoints answer 200 with ``{"ok": True}``.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def send(self, target_endpoint: str, request_payload: str) -> TargetResponse:
        self.calls.append((target_endpoint, request_payload))
        outcome = self.responses.get(
            target_endpoint, TargetResponse(status_code=200, ok=True, body={"ok": True}),
        )
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


def make_submission(**overrides):
    submission = {
        "agent_id": "agent-1",
        "target_endpoint": "https://target.example/api",
        "request_payload": {"action": "swap", "size": 1},
        "payment_amount": "10.00",
    }
    submission.update(overrides)
    return submission


def unreachable(endpoint: str) -> DispatchError:
    return DispatchError(endpoint, "connection refused")
