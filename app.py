import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from csf_review.api.routes import router
from csf_review.settings import LOG_LEVEL, ensure_runtime_dirs

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

ensure_runtime_dirs()

app = FastAPI(title="CSF Review API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
