"""
Tests for analyze_document against the deterministic in-memory analyzer.
"""

import json

import pytest

from cloudstore_mcp.engine.handlers import handle_analyze_document

REPORT = (
    "Quarterly report for the storage team. Revenue grew by ten percent. "
    "The launch is planned for March.\n"
    "Owner: Dana\n"
    "Budget: 1200\n"
)


@pytest.fixture
async def file_id(store) -> str:
    folder_id = await store.ensure_folder_path("Docs")
    return (await store.upload_file(folder_id, "report.txt", REPORT.encode())).id


async def _analyze(ctx, **params):
    return await handle_analyze_document(params, ctx)


class TestAnalyzeDocument:
    async def test_summarize_by_path(self, ctx, file_id) -> None:
        result = await _analyze(ctx, analysisType="summarize", path="Docs/report.txt")
        assert result.data == {"success": True}
        structured = result.structured_content
        assert structured["analysisType"] == "summarize"
        assert structured["answer"].startswith("Summary: Quarterly report")

    async def test_qa_with_citations(self, ctx, file_id) -> None:
        result = await _analyze(
            ctx,
            analysisType="qa",
            fileId=file_id,
            question="When is the launch planned?",
            options={"includeCitations": True},
        )
        structured = result.structured_content
        assert structured["answer"].startswith("Q: When is the launch planned?")
        assert "The launch is planned for March." in structured["answer"]
        assert structured["citations"][0]["id"] == file_id

    async def test_qa_without_citations(self, ctx, file_id) -> None:
        result = await _analyze(ctx, analysisType="qa", fileId=file_id, question="Revenue?")
        assert "citations" not in result.structured_content

    async def test_qa_over_several_files(self, ctx, store, file_id) -> None:
        other = await store.upload_file(
            await store.resolve_path("Docs"), "notes.txt", b"Nothing relevant here."
        )
        result = await _analyze(
            ctx,
            analysisType="qa",
            fileIds=[file_id, other.id],
            question="What grew?",
            options={"includeCitations": True},
        )
        assert "Revenue grew" in result.structured_content["answer"]

    async def test_extract_returns_json(self, ctx, file_id) -> None:
        result = await _analyze(ctx, analysisType="extract", fileId=file_id)
        extracted = json.loads(result.structured_content["answer"])
        assert extracted["owner"] == "Dana"
        assert extracted["budget"] == "1200"

    async def test_extract_structured_fields(self, ctx, file_id) -> None:
        result = await _analyze(
            ctx,
            analysisType="extract_structured",
            fileId=file_id,
            options={"fields": [{"key": "Owner"}, {"key": "Deadline"}]},
        )
        fields = result.structured_content["fields"]
        assert fields["Owner"] == "Dana"
        assert fields.get("Deadline") is None

    async def test_classify(self, ctx, file_id) -> None:
        result = await _analyze(ctx, analysisType="classify", fileId=file_id)
        assert result.structured_content["answer"].startswith("Classification:")

    async def test_translate_defaults_to_english(self, ctx, file_id) -> None:
        result = await _analyze(ctx, analysisType="translate", fileId=file_id)
        structured = result.structured_content
        assert structured["targetLanguage"] == "en"
        assert structured["answer"].startswith("Translation (en):")

    async def test_translate_target_language(self, ctx, file_id) -> None:
        result = await _analyze(
            ctx, analysisType="translate", fileId=file_id, options={"targetLanguage": "fr"}
        )
        assert result.structured_content["targetLanguage"] == "fr"
        assert result.structured_content["answer"].startswith("Translation (fr):")

    async def test_missing_file(self, ctx) -> None:
        result = await _analyze(ctx, analysisType="summarize", path="Docs/none.txt")
        assert result.is_error is True
        assert result.data["error"] == "File not found: Docs/none.txt"

    async def test_unsupported_type(self, ctx, file_id) -> None:
        result = await _analyze(ctx, analysisType="explain", fileId=file_id)
        assert result.is_error is True
        assert result.data["error"] == "Unsupported analysisType: explain"
