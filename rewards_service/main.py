import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rewards_service.config import settings
from rewards_service.db import engine, Base

from rewards_service.models.reward import Reward
from rewards_service.models.redemption import Redemption
from rewards_service.models.user_points import UserPoints
from rewards_service.models.point_movement import PointMovement

from rewards_service.routes.rewards import router as rewards_router
from rewards_service.routes.wallet import router as wallet_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Rewards Service")

# ─── CORS ─────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # malformed input is a 400 across the API, not FastAPI's default 422
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.on_event("startup")
def startup():
    Base.metadata.create_all(bind=engine)


app.include_router(rewards_router)
app.include_router(wallet_router)


@app.get("/")
def read_root():
    return {"message": "Rewards Service is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8001)
