from .version_decider import VersionDecision, VersioningPolicy

__all__ = ["VersionDecision", "VersioningPolicy"]
