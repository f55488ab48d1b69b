import logging

import uvicorn
from fastapi import FastAPI

from cupbracket.core.config import settings
from cupbracket.routes import team_routes, tournament_routes

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Football Cup Manager API")

# Include routers
app.include_router(tournament_routes.router, prefix="/api/tournament", tags=["Tournament"])
app.include_router(team_routes.router, prefix="/api/teams", tags=["Teams"])


@app.get("/")
async def root():
    return {"message": "Football Cup Manager API"}


def run():
    uvicorn.run("cupbracket.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
