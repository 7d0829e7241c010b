# run_dev.py
import os

from dotenv import load_dotenv


# 1) Carga .env si existe (DATABASE_URL, SECRET_KEY, ...)
load_dotenv(".env")


def main():
    import uvicorn

    spec = os.getenv("APP_MODULE", "app.main:app")
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    # 👇 reload por defecto encendido en dev; RELOAD=0 para apagarlo
    reload_flag = os.getenv("RELOAD", "1").strip() in ("1", "true", "True", "yes", "on")

    print(f"🔗 API local: http://127.0.0.1:{port}")
    print(f"🌀 reload={'ON' if reload_flag else 'OFF'}")

    uvicorn.run(
        spec,
        host=host,
        port=port,
        reload=reload_flag,
        reload_dirs=["app"],
        timeout_keep_alive=30,
        log_level=os.getenv("LOG_LEVEL", "info"),
        lifespan="on",
    )


if __name__ == "__main__":
    main()
