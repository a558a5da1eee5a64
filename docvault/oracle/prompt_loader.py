from pathlib import Path

from docvault.oracle.exceptions import OracleError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(name: str, path: Path | None = None) -> str:
    """Load a bundled prompt file.

    Args:
        name: File name inside the bundled prompts directory.
        path: Explicit path overriding the bundled file.

    Raises:
        OracleError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise OracleError(f"Failed to load prompt {path.name}: {exc}") from exc
