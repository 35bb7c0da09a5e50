#!/usr/bin/env python3
"""Run the canvassing Flask application"""

from canvass.app import create_app
from canvass.config.settings import settings

if __name__ == "__main__":
    # Validate settings
    try:
        settings.validate()
        print(f"✓ Settings validated")
        print(f"  - Max polygon area: {settings.MAX_AREA_ACRES:g} acres")
        print(f"  - Max viewport area: {settings.MAX_VIEWPORT_AREA_SQ_KM:g} sq km")
    except Exception as e:
        print(f"✗ Settings validation failed: {e}")
        exit(1)
    
    app = create_app()
    
    # Run app
    print(f"\n🚀 Starting Canvass API on http://{settings.API_HOST}:{settings.API_PORT}")
    print(f"📚 API Docs: http://{settings.API_HOST}:{settings.API_PORT}/docs\n")
    
    app.run(
        host=settings.API_HOST,
        port=settings.API_PORT,
        debug=settings.DEBUG
    )
