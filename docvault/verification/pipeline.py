from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from docvault.verification.models import (
    DocumentMetadata,
    FileDescriptor,
    VerificationStep,
)
from docvault.verification.schemas import ServerVerdict


@dataclass(frozen=True, slots=True)
class Halt:
    """Why the pipeline stopped: a user-visible category and the enforcement reason."""

    category: str
    reason: str


@dataclass(slots=True)
class PipelineContext:
    user_id: str
    file: FileDescriptor
    steps: list[VerificationStep]
    sha256_hash: str = ""
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    verdict: ServerVerdict | None = None
    warnings: list[str] = field(default_factory=list)
    halt: Halt | None = None

    def step(self, step_id: str) -> VerificationStep:
        for entry in self.steps:
            if entry.id == step_id:
                return entry
        raise KeyError(f"Unknown verification step '{step_id}'")

    def warn(self, detail: str) -> None:
        self.warnings.append(detail)


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
