import uvicorn

from advocates_api.main import app

if __name__ == "__main__":
    uvicorn.run("advocates_api.main:app", host="0.0.0.0", port=8000, reload=True)
