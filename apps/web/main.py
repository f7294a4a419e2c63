"""FastAPI web application for PubCheck."""

from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from core.config import Settings
from core.detect import identify
from core.errors import ManifestError, ResolutionError
from core.logger import setup_logging
from core.models import Manifest
from core.parse_pub import parse_pubspec
from core.resolve_pub import PubResolver
from core.serialize import manifest_to_json

settings = Settings.from_env()
setup_logging(settings.log_level)

app = FastAPI(
    title="PubCheck",
    description="Inspect and resolve dependencies declared in pubspec.yaml manifests",
    version="0.1.0",
)


class ParseRequest(BaseModel):
    """Request model for parsing a manifest."""
    content: str
    ecosystem: Optional[str] = None


class ResolveRequest(BaseModel):
    """Request model for resolving hosted dependencies."""
    content: str
    ecosystem: Optional[str] = None
    include_dev: bool = False
    registry: Optional[str] = None


class DependencyModel(BaseModel):
    name: str
    section: str
    kind: str
    version: Optional[str] = None
    url: Optional[str] = None
    ref: Optional[str] = None
    path: Optional[str] = None
    sdk: Optional[str] = None


class ManifestResponse(BaseModel):
    """Response model for a parsed manifest."""
    name: str
    version: Optional[str] = None
    description: Optional[str] = None
    homepage: Optional[str] = None
    author: Optional[str] = None
    authors: list[str] = []
    repository: Optional[str] = None
    sdk: Optional[str] = None
    dependencies: list[DependencyModel]
    dev_dependencies: list[DependencyModel]


class ResolveResponse(BaseModel):
    """Response model for dependency resolution."""
    results: list[dict]
    issues: list[dict]


def _parse_content(content: str, ecosystem: Optional[str]) -> Manifest:
    if not content.strip():
        raise HTTPException(status_code=400, detail="No content provided")

    ecosystem = ecosystem or identify(content)
    if ecosystem != "pub":
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported ecosystem: {ecosystem}. Only pubspec.yaml is currently supported.",
        )

    try:
        return parse_pubspec(content)
    except ManifestError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.post("/api/parse", response_model=ManifestResponse)
async def parse_manifest(request: ParseRequest):
    """Parse a manifest from text content."""
    manifest = _parse_content(request.content, request.ecosystem)
    return manifest_to_json(manifest)


@app.post("/api/upload", response_model=ManifestResponse)
async def upload_file(
    file: UploadFile = File(...),
    ecosystem: Optional[str] = Form(None),
):
    """Upload and parse a pubspec file."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    content = await file.read()
    try:
        text_content = content.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be valid UTF-8 text")

    ecosystem = ecosystem or identify(text_content, file.filename)
    return await parse_manifest(ParseRequest(content=text_content, ecosystem=ecosystem))


@app.post("/api/resolve", response_model=ResolveResponse)
async def resolve_dependencies(request: ResolveRequest):
    """Resolve hosted dependencies to the newest versions their constraints allow."""
    manifest = _parse_content(request.content, request.ecosystem)

    if not manifest.hosted(include_dev=request.include_dev):
        raise HTTPException(status_code=400, detail="No hosted dependencies to resolve")

    resolver = PubResolver(
        hosted_url=request.registry or settings.hosted_url,
        timeout=settings.timeout,
        max_concurrency=settings.max_concurrency,
    )

    try:
        results, issues = await resolver.resolve_manifest(manifest, include_dev=request.include_dev)
    except ResolutionError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ResolveResponse(
        results=[
            {
                "name": result.name,
                "section": "dev_dependencies" if result.dev else "dependencies",
                "constraint": result.dependency.version,
                "chosen_version": result.chosen_version,
                "latest_version": result.latest_version,
                "reason": result.reason,
                "semver_delta": result.semver_delta,
            }
            for result in results
        ],
        issues=[issue.to_dict() for issue in issues],
    )
