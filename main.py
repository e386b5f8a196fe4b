from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.config import logger, ALLOWED_ORIGINS, PORT
from core.errors import BadRequest, error_response

# Routers
from routers import auth, site_config  # type: ignore

app = FastAPI(title="TapToBuild Site Builder API")

# ---- CORS setup ----
# Development posture: all origins unless ALLOWED_ORIGINS is set
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Malformed JSON or a body of the wrong shape is a 400, like any other bad input
@app.exception_handler(RequestValidationError)
async def _invalid_request_body(request: Request, exc: RequestValidationError):
    errors = [
        {"path": "".join("/" + str(p) for p in (err.get("loc") or ())[1:]), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.info(f"[request] rejected body for {request.url.path}: {len(errors)} error(s)")
    return error_response(BadRequest("Invalid request body", errors))


app.include_router(auth.router)
app.include_router(site_config.router)


@app.get("/")
async def read_root():
    return {"message": "TapToBuild API running"}


@app.on_event("startup")
async def _log_startup():
    logger.info(f"Server running on port {PORT} (origins: {', '.join(ALLOWED_ORIGINS)})")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
