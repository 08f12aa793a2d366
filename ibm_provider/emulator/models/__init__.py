from ibm_provider.emulator.models.cbr import CbrRule, CbrZone
from ibm_provider.emulator.models.schematics import WorkspaceTemplateState
from ibm_provider.emulator.models.vpc import Instance, NetworkInterface

__all__ = ["CbrZone", "CbrRule", "Instance", "NetworkInterface", "WorkspaceTemplateState"]
