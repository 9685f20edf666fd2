import uvicorn

if __name__ == "__main__":
    # Configuration comes from DEBATEMAP_* environment variables
    # (DEBATEMAP_SNAPSHOT loads a snapshot on cold boot, all nodes collapsed).

    print("Starting Debate Map API Server...")
    print("Docs available at: http://localhost:8000/docs")

    uvicorn.run(
        "debatemap.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
