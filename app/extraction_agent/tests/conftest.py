import json
import sys
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from extraction_agent.agent import reset_agent  # noqa: E402
from extraction_agent.pipeline import extract as extract_module  # noqa: E402


class StubLLM:
    """Callable stand-in for the chat-completion client.

    ``responder`` receives the user prompt and returns raw text or raises.
    Calls are recorded because the pipeline invokes the client from worker threads.
    """

    def __init__(self, responder: Callable[[str], str]) -> None:
        self._responder = responder
        self._lock = threading.Lock()
        self.prompts: List[str] = []

    def __call__(self, messages: List[Dict[str, str]], config: object) -> str:
        prompt = messages[-1]["content"]
        with self._lock:
            self.prompts.append(prompt)
        return self._responder(prompt)

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def correction_prompts(self) -> List[str]:
        return [p for p in self.prompts if "FIELD TO CORRECT" in p]


def envelope(*fields: Dict[str, object], document_type: Optional[str] = None, notes: Optional[List[str]] = None) -> str:
    payload: Dict[str, object] = {"extracted_fields": list(fields)}
    if document_type is not None:
        payload["document_type"] = document_type
    if notes:
        payload["extraction_notes"] = notes
    return json.dumps(payload)


@pytest.fixture
def stub_llm() -> Callable[[Callable[[str], str]], StubLLM]:
    return StubLLM


@pytest.fixture
def make_envelope() -> Callable[..., str]:
    return envelope


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(extract_module, "RETRY_BASE_DELAY_S", 0.0)


@pytest.fixture(autouse=True)
def clean_agent():
    reset_agent()
    yield
    reset_agent()
