# ArrangementMCP Remote Script


def create_instance(c_instance):
    """Create and return the ArrangementMCP script instance"""
    from .control_surface import ArrangementMCP
    return ArrangementMCP(c_instance)
