"""Request timing for the canvassing API"""

import time
import structlog

logger = structlog.get_logger(__name__)

def add_performance_monitoring(app, slow_threshold_seconds: float = 2.0):
    """Log each request's duration and add an X-Response-Time header"""
    from flask import request, g
    
    @app.before_request
    def before_request():
        g.start_time = time.time()
    
    @app.after_request
    def after_request(response):
        if hasattr(g, 'start_time'):
            response_time = time.time() - g.start_time
            
            log = logger.warning if response_time > slow_threshold_seconds else logger.info
            log("Slow request detected" if response_time > slow_threshold_seconds else "Request completed",
                endpoint=request.endpoint or request.path,
                method=request.method,
                status_code=response.status_code,
                duration_ms=round(response_time * 1000, 1))
            
            # Add response time header
            response.headers['X-Response-Time'] = f"{response_time:.3f}s"
        
        return response
