import uvicorn

from jobmarket.config import settings

if __name__ == "__main__":
    uvicorn.run("jobmarket.main:app", host=settings.host, port=settings.port)
