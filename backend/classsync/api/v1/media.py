from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...schemas import DocumentMaterial, DocumentType, User, VideoMaterial
from ...services.identity_service import mint_id
from ...services.media_service import to_embed_url, to_preview_url
from ...services.policy import Action
from ...store import ClassStore
from ..deps import not_found, require, require_loaded, require_session

router = APIRouter()


class VideoCreateRequest(BaseModel):
    title: str
    url: str
    subject: str = ""
    week: int = Field(default=1, ge=1)


class MaterialCreateRequest(BaseModel):
    title: str
    url: str
    type: DocumentType = "PDF"
    description: str = ""
    subject: str = ""


@router.get("/videos")
async def list_videos(
    subject: Optional[str] = None,
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    videos = store.videos if not subject else [v for v in store.videos if v.subject == subject]
    return [v.model_dump(mode="json") for v in videos]


@router.post("/videos", status_code=201)
async def add_video(
    payload: VideoCreateRequest,
    user: User = Depends(require(Action.MANAGE_VIDEOS)),
    store: ClassStore = Depends(require_loaded),
):
    video = VideoMaterial(
        id=mint_id(),
        title=payload.title,
        url=to_embed_url(payload.url.strip()),
        subject=payload.subject,
        week=payload.week,
        uploaded_by=user.role.value,
    )
    await store.add_video(video)
    return video.model_dump(mode="json")


@router.delete("/videos/{video_id}")
async def delete_video(
    video_id: str,
    _: User = Depends(require(Action.MANAGE_VIDEOS)),
    store: ClassStore = Depends(require_loaded),
):
    if not any(v.id == video_id for v in store.videos):
        raise not_found("Video", video_id)
    await store.delete_video(video_id)
    return {"ok": True}


@router.get("/materials")
async def list_materials(
    subject: Optional[str] = None,
    _: User = Depends(require_session),
    store: ClassStore = Depends(require_loaded),
):
    materials = store.materials if not subject else [m for m in store.materials if m.subject == subject]
    return [m.model_dump(mode="json") for m in materials]


@router.post("/materials", status_code=201)
async def add_material(
    payload: MaterialCreateRequest,
    user: User = Depends(require(Action.MANAGE_MATERIALS)),
    store: ClassStore = Depends(require_loaded),
):
    material = DocumentMaterial(
        id=mint_id(),
        title=payload.title,
        type=payload.type,
        url=to_preview_url(payload.url.strip()),
        description=payload.description,
        subject=payload.subject,
        uploaded_by=user.role.value,
    )
    await store.add_material(material)
    return material.model_dump(mode="json")


@router.delete("/materials/{material_id}")
async def delete_material(
    material_id: str,
    _: User = Depends(require(Action.MANAGE_MATERIALS)),
    store: ClassStore = Depends(require_loaded),
):
    if not any(m.id == material_id for m in store.materials):
        raise not_found("Material", material_id)
    await store.delete_material(material_id)
    return {"ok": True}
