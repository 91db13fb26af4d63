# runtime_agent/server.py
"""
Runtime Agent - exposes the container engine over HTTP.
Lets the lifecycle orchestrator drive a Docker daemon on another host.
"""

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Dict, Any, Optional
import logging

from appbox.core.errors import EngineError
from appbox.core.models import ImageSpec
from appbox.engine.docker_engine import DockerEngine

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Runtime Agent",
    description="Container engine agent for appbox",
    version="1.0.0"
)

# Engine (connects to local Docker daemon)
try:
    engine: Optional[DockerEngine] = DockerEngine()
    logger.info("✅ Connected to Docker daemon")
except EngineError as e:
    logger.error(f"❌ Failed to connect to Docker: {e}")
    engine = None


# ============================================
# REQUEST/RESPONSE MODELS
# ============================================

class ImageRequest(BaseModel):
    """Image to build or pull."""
    name: Optional[str] = Field(default=None, description="Image name (e.g., 'kalabox/nginx')")
    build: bool = Field(default=False, description="Build from src_root instead of pulling")
    src_root: Optional[str] = Field(default=None, description="Build context on the agent host")


class CreateRequest(BaseModel):
    """Create container request (Engine API style install options)."""
    options: Dict[str, Any] = Field(..., description="Install options")


class CreateResponse(BaseModel):
    """Create container response."""
    container_id: str
    container_name: Optional[str]


class StartRequest(BaseModel):
    """Start container request."""
    options: Dict[str, Any] = Field(default_factory=dict, description="Start options")


# ============================================
# HELPERS
# ============================================

def _require_engine() -> DockerEngine:
    if engine is None:
        raise HTTPException(status_code=503, detail="Docker not available")
    return engine


def _engine_failure(action: str, e: EngineError) -> HTTPException:
    logger.error(f"{action} failed: {e}")
    return HTTPException(status_code=500, detail=str(e))


# ============================================
# ENDPOINTS
# ============================================

@app.get("/health")
def health_check():
    """Health check endpoint."""
    current = _require_engine()

    try:
        current.client.ping()
    except Exception as e:
        logger.error(f"Docker ping failed: {e}")
        raise HTTPException(status_code=503, detail="Docker not responding")

    return {
        "status": "healthy",
        "docker_connected": True
    }


@app.post("/images/build")
def build_image(request: ImageRequest):
    """Build an image from source, or pull it when not buildable."""
    current = _require_engine()

    try:
        current.build(ImageSpec(name=request.name, build=request.build, src_root=request.src_root))
    except EngineError as e:
        raise _engine_failure(f"Build of {request.name}", e)

    return {"status": "ready", "image": request.name}


@app.post("/containers", response_model=CreateResponse)
def create_container(request: CreateRequest):
    """Create a container from install options."""
    current = _require_engine()

    logger.info(f"Creating container: {request.options.get('name')}")
    try:
        container = current.create(request.options)
    except EngineError as e:
        raise _engine_failure(f"Create of {request.options.get('name')}", e)

    logger.info(f"✅ Container created: {container.id[:12]}")
    return CreateResponse(container_id=container.id, container_name=container.name)


@app.post("/containers/{container_id}/start")
def start_container(container_id: str, request: StartRequest):
    """Start a container."""
    current = _require_engine()

    try:
        current.start(container_id, request.options)
    except EngineError as e:
        raise _engine_failure(f"Start of {container_id}", e)

    return {"status": "started", "container_id": container_id}


@app.post("/containers/{container_id}/stop")
def stop_container(container_id: str):
    """Stop a container."""
    current = _require_engine()

    try:
        current.stop(container_id)
    except EngineError as e:
        raise _engine_failure(f"Stop of {container_id}", e)

    return {"status": "stopped", "container_id": container_id}


@app.delete("/containers/{container_id}")
def remove_container(container_id: str):
    """Remove a container."""
    current = _require_engine()

    try:
        current.remove(container_id)
    except EngineError as e:
        raise _engine_failure(f"Remove of {container_id}", e)

    return {"status": "removed", "container_id": container_id}


if __name__ == "__main__":
    import uvicorn

    logger.info("🚀 Starting Runtime Agent...")
    logger.info("📍 Listening on 0.0.0.0:9000")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=9000,
        log_level="info"
    )
