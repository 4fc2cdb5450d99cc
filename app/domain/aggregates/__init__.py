from .appointment import UNSET, AppointmentAggregate, AppointmentCreationData, AppointmentUpdateData

__all__ = ["UNSET", "AppointmentAggregate", "AppointmentCreationData", "AppointmentUpdateData"]
