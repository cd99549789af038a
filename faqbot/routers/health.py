from fastapi import APIRouter, Request

router = APIRouter()

@router.get("/live")
def live():
    return {"status": "ok"}

@router.get("/ready")
def ready(request: Request):
    ctx = getattr(request.app.state, "faq", None)
    if ctx is None:
        return {"status": "starting", "faq": {}}
    return {"status": "ok", "faq": ctx.index.sizes()}

@router.get("/routes")
def routes(request: Request):
    # registered routes and mounts, e.g. /images
    return {
        "paths": sorted({r.path for r in request.app.routes if getattr(r, "path", None)})
    }
