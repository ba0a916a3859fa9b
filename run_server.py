"""
DocuValle Server Runner
=======================
Run this directly: python run_server.py
"""
import os
import sys

# Fix console encoding for Windows
if sys.platform == 'win32':
    try:
        sys.stdout.reconfigure(encoding='utf-8', errors='replace')
        sys.stderr.reconfigure(encoding='utf-8', errors='replace')
    except (AttributeError, OSError):
        pass  # Older Python or redirected output


def main():
    if "DEBUG" not in os.environ:
        os.environ["DEBUG"] = "false"

    from app.core.config import get_settings
    settings = get_settings()

    print()
    print("=" * 60)
    print(f"  {settings.app_name.upper()} SERVER")
    print("=" * 60)
    print()
    print(f"  Vision API:     {'configured' if settings.vision_configured else 'NOT CONFIGURED'}")
    print(f"  Gemini:         {'configured' if settings.generative_configured else 'disabled'}")
    print(f"  API Docs:       http://localhost:{settings.port}/api/docs")
    print(f"  Analyze:        POST http://localhost:{settings.port}/api/authenticity/analyze")
    print()
    print("  Press Ctrl+C to stop")
    print("=" * 60)
    print()

    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        workers=1,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
