from tripsmith.modules.observability.logger import StructuredLogger

__all__ = ["StructuredLogger"]
