# fastapi web api for document to study guide conversion
from fastapi import Depends, FastAPI, HTTPException, UploadFile, File, Form
from fastapi.responses import FileResponse
from fastapi.middleware.cors import CORSMiddleware
from functools import lru_cache
from pathlib import Path
from typing import Optional
import os
import logging

from .processing_service import StudyGuideService
from .document_parser import DocumentParser
from .exporter import StudyGuideExporter
from .models import StudyGuideRequest
from .settings import get_settings

# configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# initialize fastapi application
app = FastAPI(
    title="StudyLens API",
    description="Turn slide decks and PDFs into bilingual study guides using AI",
    version="1.0.0"
)

# add cors middleware to allow cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

exporter = StudyGuideExporter()


# one service per process; tests swap it through dependency_overrides
@lru_cache()
def get_service() -> StudyGuideService:
    return StudyGuideService(settings=get_settings())


def _study_guide_path(service: StudyGuideService, name: str) -> Path:
    return service.output_dir / f"{Path(name).name}.json"


# endpoint to upload pdf and pptx files
@app.post("/upload")
async def upload_document(file: UploadFile = File(...), service: StudyGuideService = Depends(get_service)):
    """Upload a PDF or PPTX file"""
    filename = Path(file.filename or "").name
    if not DocumentParser().is_supported(filename):
        raise HTTPException(status_code=400, detail="Unsupported file format. Please upload a PDF or PPTX.")

    try:
        upload_dir = Path(service.settings.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)
        file_path = upload_dir / filename

        content = await file.read()
        with open(file_path, "wb") as buffer:
            buffer.write(content)
    except OSError as e:
        logger.error(f"Error uploading file: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")

    logger.info(f"File uploaded: {filename}")

    return {
        "message": "File uploaded successfully",
        "filename": filename,
        "file_path": str(file_path),
        "file_size": len(content)
    }


# endpoint to process a document and generate a study guide
@app.post("/process")
async def process_document(
    document_path: str = Form(...),
    chunk_size: Optional[int] = Form(None, gt=0),
    service: StudyGuideService = Depends(get_service)
):
    """Process an uploaded document and generate its study guide"""
    if not os.path.exists(document_path):
        raise HTTPException(status_code=404, detail="Document not found")

    request = StudyGuideRequest(
        document_path=document_path,
        chunk_size=chunk_size or service.settings.chunk_size
    )
    response = await service.process_document(request)

    if not response.success:
        raise HTTPException(status_code=500, detail=response.message)

    return response.model_dump(by_alias=True)


@app.get("/status/{name}")
async def get_processing_status(name: str, service: StudyGuideService = Depends(get_service)):
    """Get processing status for a document"""
    return service.get_processing_status(Path(name).name)


@app.get("/study-guides/{name}")
async def get_study_guide(name: str, service: StudyGuideService = Depends(get_service)):
    """Get study guide data as JSON"""
    document = service.load_existing_study_guide(Path(name).name)
    if document is None:
        raise HTTPException(status_code=404, detail="Study guide not found")
    return document.model_dump(by_alias=True)


@app.get("/study-guides/{name}/stats")
async def get_study_guide_stats(name: str, service: StudyGuideService = Depends(get_service)):
    """Get study guide statistics"""
    document = service.load_existing_study_guide(Path(name).name)
    if document is None:
        raise HTTPException(status_code=404, detail="Study guide not found")
    return exporter.get_statistics(document)


@app.get("/download/{name}")
async def download_study_guide(name: str, service: StudyGuideService = Depends(get_service)):
    """Download the generated study guide JSON"""
    json_path = _study_guide_path(service, name)
    if not json_path.exists():
        raise HTTPException(status_code=404, detail="Study guide not found")

    return FileResponse(
        path=str(json_path),
        filename=json_path.name,
        media_type="application/json"
    )


@app.get("/api")
async def api_info():
    """API information endpoint"""
    return {
        "message": "StudyLens API",
        "version": "1.0.0",
        "endpoints": {
            "upload": "/upload",
            "process": "/process",
            "status": "/status/{name}",
            "study_guide": "/study-guides/{name}",
            "stats": "/study-guides/{name}/stats",
            "download": "/download/{name}",
            "health": "/health"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "studylens"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
