from .orchestrator import AdmissionOrchestrator, AdmissionOutcome, QueueAdmission

__all__ = ["AdmissionOrchestrator", "AdmissionOutcome", "QueueAdmission"]
