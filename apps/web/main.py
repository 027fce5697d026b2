"""FastAPI web application for depscout."""

from pathlib import Path

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict

from core.analyzer import UpdateAnalyzer, split_package_names
from core.detect import identify
from core.ecosystems import ECOSYSTEMS, EcosystemDescriptor, get_ecosystem
from core.errors import DepscoutError
from core.models import UpdateType
from core.parse import load_manifest

app = FastAPI(
    title="depscout",
    description="Find available dependency updates across ecosystems",
    version="0.1.0",
)


class AnalyzeRequest(BaseModel):
    """Request model for analyzing a manifest."""

    content: str
    filename: str | None = None
    packages: list[str] | None = None


class EcosystemModel(BaseModel):
    """A supported ecosystem."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: str
    manifest_files: list[str]
    package_manager_name: str
    registry_id: str


class RegistryMetadataModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    latest_version: str
    is_deprecated: bool = False
    description: str | None = None
    homepage: str | None = None
    repository_url: str | None = None
    license: str | None = None
    deprecation_message: str | None = None
    last_published: str | None = None
    maintainers: list[str] | None = None
    download_count: int | None = None


class PackageUpdateModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    current_version: str
    latest_version: str
    ecosystem: str
    package_manager_name: str
    update_type: UpdateType
    has_breaking_change: bool
    breaking_change_notes: list[str]
    is_deprecated: bool
    metadata: RegistryMetadataModel | None = None


class AnalyzeResponse(BaseModel):
    """Response model for an analysis."""

    ecosystem: str
    manifest: str
    checked: int
    updates: list[PackageUpdateModel]
    not_found: list[str]
    has_breaking_changes: bool


def _manifest_filename(descriptor: EcosystemDescriptor, content: str, filename: str | None) -> str:
    """Pick the grammar for the submitted content."""
    if filename and Path(filename).name in descriptor.manifest_files:
        return Path(filename).name
    if descriptor.id == "python" and ("[tool.poetry" in content or "[project]" in content):
        return "pyproject.toml"
    return descriptor.manifest_files[0]


@app.get("/", response_class=HTMLResponse)
async def home():
    """Serve the main application page."""
    return get_index_html()


@app.get("/api/ecosystems", response_model=list[EcosystemModel])
async def list_ecosystems():
    """List the supported ecosystems."""
    return [EcosystemModel.model_validate(descriptor) for descriptor in ECOSYSTEMS.values()]


@app.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest):
    """Analyze submitted manifest content for available updates."""
    content = request.content.lstrip("\ufeff").strip()
    if not content:
        raise HTTPException(status_code=400, detail="No content provided")

    ecosystem_id = identify(content, request.filename)
    descriptor = get_ecosystem(ecosystem_id)
    if descriptor is None:
        raise HTTPException(status_code=400, detail=f"Unsupported ecosystem: {ecosystem_id}")

    filename = _manifest_filename(descriptor, content, request.filename)
    declarations = load_manifest(descriptor.id, content, filename).as_dict()
    if not declarations:
        raise HTTPException(status_code=400, detail="No dependencies found")

    try:
        report = await UpdateAnalyzer().analyze_declarations(descriptor, declarations, request.packages)
    except DepscoutError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return AnalyzeResponse(
        ecosystem=descriptor.id,
        manifest=filename,
        checked=report.checked,
        updates=[PackageUpdateModel.model_validate(update) for update in report.updates],
        not_found=report.not_found,
        has_breaking_changes=report.has_breaking_changes,
    )


@app.post("/api/upload", response_model=AnalyzeResponse)
async def upload_file(
    file: UploadFile = File(...),
    packages: str | None = Form(None),
):
    """Upload a manifest file and analyze it."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    data = await file.read()
    try:
        text_content = data.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be valid UTF-8 text")

    names = split_package_names([packages]) or None
    return await analyze(AnalyzeRequest(content=text_content, filename=file.filename, packages=names))


def get_index_html() -> str:
    """Return the main HTML page."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>depscout - Dependency Updates</title>
        <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
    </head>
    <body>
        <div class="container py-4">
            <h1 class="display-5 fw-bold text-primary">depscout</h1>
            <p class="lead text-muted">Paste a manifest to see which dependencies have newer releases</p>
            <div class="mb-3">
                <input id="filename" class="form-control mb-2" placeholder="package.json, Cargo.toml, requirements.txt ...">
                <textarea id="content" class="form-control font-monospace" rows="12"></textarea>
            </div>
            <button id="analyze" class="btn btn-primary">Check for updates</button>
            <table class="table mt-4">
                <thead><tr><th>Package</th><th>Current</th><th>Latest</th><th>Type</th><th>Notes</th></tr></thead>
                <tbody id="results"></tbody>
            </table>
        </div>
        <script>
            document.getElementById("analyze").addEventListener("click", async () => {
                const body = {
                    content: document.getElementById("content").value,
                    filename: document.getElementById("filename").value || null,
                };
                const response = await fetch("/api/analyze", {
                    method: "POST",
                    headers: {"Content-Type": "application/json"},
                    body: JSON.stringify(body),
                });
                const data = await response.json();
                const rows = document.getElementById("results");
                rows.innerHTML = "";
                if (!response.ok) {
                    rows.innerHTML = `<tr><td colspan="5" class="text-danger"></td></tr>`;
                    rows.querySelector("td").textContent = data.detail;
                    return;
                }
                for (const u of data.updates) {
                    const tr = document.createElement("tr");
                    const notes = [];
                    if (u.has_breaking_change) notes.push("breaking");
                    if (u.is_deprecated) notes.push("deprecated");
                    for (const value of [u.name, u.current_version, u.latest_version, u.update_type, notes.join(", ")]) {
                        const td = document.createElement("td");
                        td.textContent = value;
                        tr.appendChild(td);
                    }
                    rows.appendChild(tr);
                }
            });
        </script>
    </body>
    </html>
    """
