"""Document endpoints: parse, validate, convert, diff, patch and conflicts.

Engine failures are ordinary 200 responses carrying ``success: false``
and the error list; only transport problems become HTTP errors.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends

from yamlnote.api.deps import get_engine
from yamlnote.api.schemas import (
    ConflictDetail,
    ConflictResponse,
    DiffRequest,
    DiffResponse,
    EditOpModel,
    MarkdownRequest,
    MarkdownResponse,
    ParseRequest,
    ParseResponse,
    PatchRequest,
    PatchResponse,
    SchemaCompileRequest,
    SerializeRequest,
    SerializeResponse,
    TreeRequest,
    TreeResponse,
    ValidateRequest,
)
from yamlnote.models.errors import ErrorKind, ValidationError, ValidationResult
from yamlnote.models.value import from_python, to_python
from yamlnote.service.engine import DocumentEngine

router = APIRouter()


@router.post("/parse", response_model=ParseResponse)
async def parse_document(
    body: ParseRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> ParseResponse:
    """Parse YAML text into a value tree."""
    outcome = engine.parse(body.text)
    if outcome.value is None:
        return ParseResponse(success=False, errors=outcome.errors)
    return ParseResponse(success=True, content=to_python(outcome.value))


@router.post("/serialize", response_model=SerializeResponse)
async def serialize_document(
    body: SerializeRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> SerializeResponse:
    """Render a value tree as canonical YAML."""
    try:
        value = from_python(body.content)
    except (TypeError, RecursionError) as exc:
        error = ValidationError(message=str(exc), code=ErrorKind.PARSE)
        return SerializeResponse(success=False, errors=[error])
    return SerializeResponse(success=True, text=engine.serialize(value))


@router.post("/validate", response_model=ValidationResult)
async def validate_document(
    body: ValidateRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> ValidationResult:
    """Validate a document against a schema."""
    return engine.validate(body.text, body.schema_text)


@router.post("/schema/compile", response_model=ValidationResult)
async def compile_schema(
    body: SchemaCompileRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> ValidationResult:
    """Check that a schema is well formed."""
    return engine.compile_schema(body.schema_text)


@router.post("/frontmatter/validate", response_model=ValidationResult)
async def validate_frontmatter(
    body: MarkdownRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> ValidationResult:
    """Check a markdown document's frontmatter block."""
    return engine.parse_and_validate_frontmatter(body.markdown)


# -- conversion --------------------------------------------------------------


@router.post("/convert/to-tree", response_model=TreeResponse)
async def convert_to_tree(
    body: MarkdownRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> TreeResponse:
    """Convert heading-structured markdown to a tree."""
    tree = engine.structured_to_tree(body.markdown)
    return TreeResponse(tree=to_python(tree), yaml=engine.serialize(tree))


@router.post("/convert/to-markdown", response_model=MarkdownResponse)
async def convert_to_markdown(
    body: TreeRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> MarkdownResponse:
    """Render a heading tree back to markdown."""
    try:
        tree = from_python(body.tree)
    except (TypeError, RecursionError):
        return MarkdownResponse(markdown="")
    return MarkdownResponse(markdown=engine.tree_to_structured(tree))


# -- diff / patch ------------------------------------------------------------


@router.post("/diff", response_model=DiffResponse)
async def diff_documents(
    body: DiffRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> DiffResponse:
    """Compute the edit script from ``base`` to ``edited``."""
    patch = engine.diff(body.base, body.edited)
    return DiffResponse(patch=[EditOpModel(**op.to_dict()) for op in patch])


@router.post("/patch", response_model=PatchResponse)
async def patch_document(
    body: PatchRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> PatchResponse:
    """Apply an edit script to a document."""
    patch_json = json.dumps([op.model_dump(mode="json", exclude_unset=True) for op in body.patch])
    return PatchResponse(text=engine.apply_patch(body.text, patch_json))


@router.post("/conflicts", response_model=ConflictResponse)
async def detect_conflicts(
    body: DiffRequest,
    engine: DocumentEngine = Depends(get_engine),  # noqa: B008
) -> ConflictResponse:
    """Report every path where ``edited`` departs from ``base``."""
    report = engine.detect_conflicts(body.base, body.edited)
    return ConflictResponse(
        has_conflict=report.has_conflict,
        conflicts=[ConflictDetail(**c.to_dict()) for c in report.conflicts],
    )
