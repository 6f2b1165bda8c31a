class AssignmentError(Exception):
    """Base class for failures the assignment layer reports to callers."""


class SettingsNotFound(AssignmentError):
    def __init__(self, doctor_id: str):
        super().__init__(f'Doctor settings not found for doctor {doctor_id}.')
        self.doctor_id = doctor_id


class ConsultationNotFound(AssignmentError):
    def __init__(self, consultation_id: str):
        super().__init__(f'Consultation {consultation_id} not found.')
        self.consultation_id = consultation_id


class StoreError(AssignmentError):
    """The record store failed to read or write."""
