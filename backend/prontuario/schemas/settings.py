"""Clinic settings schema (the single settings record)."""

from pydantic import Field

from prontuario.schemas.common import RecordModel


class ClinicProfile(RecordModel):
    """Professional and clinic identity printed on every document.

    This is the part of the settings that is safe to serve back to clients.
    """

    professional_name: str = ""
    professional_reg: str = Field(default="", description="Registration (CRO/CRM/COREN)")
    clinic_name: str = ""
    professional_contact: str = ""
    professional_email: str = ""
    professional_address: str = ""


class ClinicSettings(ClinicProfile):
    """The stored settings record: clinic profile plus the access PIN."""

    access_pin: str = Field(default="", description="Blank keeps the stored PIN on save")

    def profile(self) -> ClinicProfile:
        """The settings without the access PIN."""
        return ClinicProfile.model_validate(self.model_dump(exclude={"access_pin"}))
