import json

import pytest

from filerenamer.domain.models import FileDescriptor
from filerenamer.domain.rename_plan import edit_final_name
from filerenamer.errors import BatchProcessingError, InputValidationError
from filerenamer.services.extraction_service import ExtractionService
from filerenamer.services.proposal_service import ProposalService
from filerenamer.services.rename_plan_service import RenamePlanService


class DummyExtractor:
    def extract_text(self, data: bytes) -> str:
        return ""


class DummyByteSource:
    def __init__(self) -> None:
        self.fetched: list[bytes] = []

    def fetch_bytes(self, content_ref: bytes | str) -> bytes:
        self.fetched.append(bytes(content_ref))
        return bytes(content_ref)


class DummyLLM:
    def __init__(self, name: str = "report", caption: str = "") -> None:
        self.name = name
        self.caption = caption
        self.prompts: list[str] = []
        self.image_calls = 0

    def generate_text(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        return json.dumps(
            {
                "proposed_filename": self.name,
                "confidence": 0.9,
                "doctype": "report",
                "date_iso": None,
                "primary_entity": None,
                "secondary_entity": None,
                "topic": None,
                "rationale": "Test proposal.",
            }
        )

    def describe_image(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        self.image_calls += 1
        return self.caption


def _service(llm: DummyLLM, byte_source: DummyByteSource | None = None) -> RenamePlanService:
    extraction = ExtractionService(DummyExtractor(), DummyExtractor(), byte_source or DummyByteSource())
    return RenamePlanService(extraction, ProposalService(llm))


def _file(file_id: str, name: str, content: bytes = b"body", mime: str = "text/plain", **kwargs):
    return FileDescriptor(
        file_id=file_id,
        original_name=name,
        mime_type=mime,
        size_bytes=len(content),
        content_ref=content,
        **kwargs,
    )


def _files() -> list[FileDescriptor]:
    return [_file("1", "a.txt"), _file("2", "b.txt"), _file("3", "c.txt")]


def test_generate_builds_plan_in_upload_order() -> None:
    plan, snippets = _service(DummyLLM()).generate(_files())
    assert [entry.file_id for entry in plan] == ["1", "2", "3"]
    assert [entry.final_name for entry in plan] == ["report.txt", "report-v2.txt", "report-v3.txt"]
    assert all(entry.included and not entry.edited for entry in plan)
    assert [snippet.text for snippet in snippets] == ["body", "body", "body"]


def test_generate_orders_by_sort_index() -> None:
    files = [_file("1", "a.txt", sort_index=2), _file("2", "b.txt", sort_index=0)]
    plan, _ = _service(DummyLLM()).generate(files)
    assert [entry.file_id for entry in plan] == ["2", "1"]
    assert plan[0].final_name == "report.txt"


def test_generate_passes_instructions() -> None:
    llm = DummyLLM()
    _service(llm).generate([_file("1", "a.txt")], "Use project code X1")
    assert llm.prompts[0].startswith("User Instructions:\nUse project code X1")


def test_generate_requires_files() -> None:
    with pytest.raises(InputValidationError):
        _service(DummyLLM()).generate([])


def test_rerun_replaces_only_selected_entries() -> None:
    files = _files()
    plan, _ = _service(DummyLLM()).generate(files)
    plan = edit_final_name(plan, "1", "mine.txt")

    llm = DummyLLM(name="summary")
    merged, snippets = _service(llm).rerun(plan, files, {"3"})
    assert [snippet.file_id for snippet in snippets] == ["3"]
    assert len(llm.prompts) == 1
    assert merged[0] == plan[0]
    assert merged[0].final_name == "mine.txt"
    assert merged[0].edited
    assert merged[1] == plan[1]
    assert merged[2].final_name == "summary.txt"
    assert merged[2].built_filename == "summary"


def test_rerun_never_reuses_a_held_name() -> None:
    files = _files()
    plan, _ = _service(DummyLLM()).generate(files)
    merged, _ = _service(DummyLLM()).rerun(plan, files, {"3"})
    assert merged[2].final_name == "report-v3.txt"

    merged, _ = _service(DummyLLM()).rerun(plan, files, {"2"})
    final_names = [entry.final_name for entry in merged]
    assert len(set(final_names)) == 3
    assert final_names[0] == "report.txt"
    assert final_names[2] == "report-v3.txt"


def test_rerun_requires_a_selection() -> None:
    files = _files()
    plan, _ = _service(DummyLLM()).generate(files)
    with pytest.raises(InputValidationError):
        _service(DummyLLM()).rerun(plan, files, set())
    with pytest.raises(InputValidationError):
        _service(DummyLLM()).rerun(plan, files, {"missing"})


def test_images_are_captioned_from_their_bytes() -> None:
    llm = DummyLLM(name="sunset-beach", caption="A sunset over a beach")
    plan, _ = _service(llm).generate([_file("1", "IMG_1.png", b"\x89PNG", mime="image/png")])
    assert llm.image_calls == 1
    assert "A sunset over a beach" in llm.prompts[0]
    assert plan[0].final_name == "sunset-beach.png"


def test_image_bytes_are_fetched_once() -> None:
    byte_source = DummyByteSource()
    llm = DummyLLM(name="sunset-beach", caption="A sunset over a beach")
    _service(llm, byte_source).generate(
        [_file("1", "IMG_1.png", b"\x89PNG", mime="image/png"), _file("2", "a.txt")]
    )
    assert byte_source.fetched == [b"\x89PNG", b"body"]
    assert llm.image_calls == 1


def test_unexpected_batch_failure_is_wrapped() -> None:
    class BrokenProposals:
        def propose_batch(self, items, user_instructions=None, seed_names=None, taken_names=None):
            raise KeyError("lost result")

    byte_source = DummyByteSource()
    extraction = ExtractionService(DummyExtractor(), DummyExtractor(), byte_source)
    service = RenamePlanService(extraction, BrokenProposals())
    with pytest.raises(BatchProcessingError):
        service.generate(_files())
