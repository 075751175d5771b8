"""System probes."""

from service_layer.adapters.system.probes import DiskProbe, MemoryProbe, UptimeProbe

__all__ = ["DiskProbe", "MemoryProbe", "UptimeProbe"]
