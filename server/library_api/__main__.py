import uvicorn

from library_api.config import settings

if __name__ == "__main__":
    uvicorn.run("library_api.main:app", host=settings.HOST, port=settings.PORT)
