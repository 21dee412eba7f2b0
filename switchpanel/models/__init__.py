"""Data models for the switch panel."""

from switchpanel.models.device import Device, DeviceDraft, Session, SwitchConfig, SystemInfo
from switchpanel.models.port import DomReading, LinkStatus, Port, PortMode
from switchpanel.models.section import LayoutMode, PortSection
from switchpanel.models.traffic import TrafficSample

__all__ = [
    "Device",
    "DeviceDraft",
    "Session",
    "SwitchConfig",
    "SystemInfo",
    "DomReading",
    "LinkStatus",
    "Port",
    "PortMode",
    "LayoutMode",
    "PortSection",
    "TrafficSample",
]
