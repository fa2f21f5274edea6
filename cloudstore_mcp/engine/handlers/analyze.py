"""Document analysis tool handler.

Handles:
- analyze_document: summarize, qa, extract, extract_structured, classify, translate
"""

from typing import Any

from ...models import AnalysisResult, AnalysisType, ToolResult
from ...store.errors import InvalidArgumentError
from .base import HandlerContext, error_message, resolve_file_id


async def _resolve_file_ids(params: dict[str, Any], ctx: HandlerContext) -> list[str]:
    """Collect target file IDs; the first one is the primary document."""
    if params.get("fileId"):
        return [params["fileId"]]
    if params.get("fileIds"):
        return list(params["fileIds"])
    if params.get("path"):
        return [await resolve_file_id(ctx, params["path"])]
    if params.get("paths"):
        return [await resolve_file_id(ctx, p) for p in params["paths"]]
    raise InvalidArgumentError("fileId(s) is required")


async def _analyze(
    analysis_type: AnalysisType, params: dict[str, Any], ctx: HandlerContext
) -> AnalysisResult:
    options = params.get("options") or {}
    file_ids = await _resolve_file_ids(params, ctx)
    primary = file_ids[0]
    analyzer = ctx.analyzer

    if analysis_type == AnalysisType.SUMMARIZE:
        focus = options.get("summaryFocus")
        prompt = "Summarize the document in detail." + (f" Focus on: {focus}." if focus else "")
        res = await analyzer.text_gen(primary, prompt)
        return AnalysisResult(analysis_type=analysis_type.value, answer=res.answer)

    if analysis_type == AnalysisType.QA:
        res = await analyzer.ask(
            file_ids,
            params.get("question") or "Answer questions about the documents.",
            mode="multiple_item_qa" if len(file_ids) > 1 else "single_item_qa",
            include_citations=bool(options.get("includeCitations")),
            dialogue_history=options.get("dialogueHistory"),
        )
        return AnalysisResult(
            analysis_type=analysis_type.value, answer=res.answer, citations=res.citations
        )

    if analysis_type == AnalysisType.EXTRACT:
        fields = options.get("fields") or []
        if fields:
            prompt = "Extract the following fields as JSON: " + ", ".join(f["key"] for f in fields)
        else:
            prompt = "Extract key facts as JSON."
        res = await analyzer.extract([primary], prompt)
        return AnalysisResult(analysis_type=analysis_type.value, answer=res.answer)

    if analysis_type == AnalysisType.EXTRACT_STRUCTURED:
        extraction = await analyzer.extract_structured(
            [primary],
            fields=options.get("fields"),
            metadata_template=options.get("metadataTemplate"),
        )
        return AnalysisResult(analysis_type=analysis_type.value, fields=extraction.fields)

    if analysis_type == AnalysisType.CLASSIFY:
        res = await analyzer.text_gen(
            primary, "Classify the document into categories and provide brief rationale."
        )
        return AnalysisResult(analysis_type=analysis_type.value, answer=res.answer)

    language = options.get("targetLanguage") or "en"
    res = await analyzer.text_gen(primary, f"Translate the document to {language}.")
    return AnalysisResult(
        analysis_type=analysis_type.value, answer=res.answer, target_language=language
    )


async def handle_analyze_document(
    params: dict[str, Any],
    ctx: HandlerContext,
) -> ToolResult:
    """Run one analysis over the addressed document(s).

    Args:
        params: Dict containing:
            - analysisType: summarize, qa, extract, extract_structured, classify, translate
            - fileId | path | fileIds | paths: Target document(s)
            - question: Question for qa
            - options: includeCitations, targetLanguage, dialogueHistory, fields,
              metadataTemplate, summaryFocus

    Returns:
        ToolResult whose structured payload is an AnalysisResult
    """
    try:
        analysis_type = AnalysisType(params.get("analysisType"))
    except ValueError:
        return ToolResult.failure(f"Unsupported analysisType: {params.get('analysisType')}")

    try:
        result = await _analyze(analysis_type, params, ctx)
    except Exception as e:
        return ToolResult.failure(error_message(e))
    return ToolResult(data={"success": True}, structured_content=result.to_wire())
