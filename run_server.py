import uvicorn
import os

if __name__ == "__main__":
    port = int(os.environ.get("FW_PORT", "8000"))

    print("Starting Futures Wheel API Server...")
    print(f"Docs available at: http://localhost:{port}/docs")

    uvicorn.run(
        "futures_wheel.api.server:app",
        host="0.0.0.0",
        port=port,
        reload=True
    )
