from pydantic import BaseModel


class BatchOutcome(BaseModel):
    """How the units of one batch ended once the batch settled."""

    spawned: int = 0
    published: int = 0
    failed: int = 0
    abandoned: int = 0

    @property
    def timed_out(self) -> bool:
        return self.abandoned > 0
