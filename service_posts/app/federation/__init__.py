from .documents import ACTIVITY_JSON, JRD_JSON, actor, nodeinfo, nodeinfo_links, webfinger

__all__ = ["ACTIVITY_JSON", "JRD_JSON", "actor", "nodeinfo", "nodeinfo_links", "webfinger"]
