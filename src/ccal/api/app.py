from fastapi import FastAPI
from ccal.api.public import router as public_router

app = FastAPI(title="ccal public api")
app.include_router(public_router)
