"""API Routes Registration"""

from flask_restx import Api

def register_routes(api: Api) -> None:
    """Register all API routes"""
    
    # Import namespaces
    from canvass.api.routes.addresses import addresses_ns
    from canvass.api.routes.walk_routes import routes_ns
    
    # Register namespaces
    api.add_namespace(addresses_ns, path="/addresses")
    api.add_namespace(routes_ns, path="/routes")
