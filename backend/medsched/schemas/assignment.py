from pydantic import BaseModel, Field, field_validator

from medsched.models.schedule import CSRCategory


class PBLAssignmentIn(BaseModel):
    course_code: str = Field(min_length=1, max_length=50, alias="kode_mk")
    lecturer_id: str = Field(min_length=1, max_length=36, alias="dosen_id")
    module_number: int | None = Field(default=None, ge=1, alias="pbl_id")
    small_group_id: str | None = Field(default=None, alias="kelompok_kecil_id")

    model_config = {"populate_by_name": True}

    @field_validator("course_code", "lecturer_id")
    @classmethod
    def strip_identifier(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Nilai tidak boleh kosong")
        return value


class CSRAssignmentIn(BaseModel):
    course_code: str = Field(min_length=1, max_length=50, alias="kode_mk")
    lecturer_id: str = Field(min_length=1, max_length=36, alias="dosen_id")
    category: CSRCategory = Field(default=CSRCategory.reguler, alias="kategori")

    model_config = {"populate_by_name": True}

    @field_validator("course_code", "lecturer_id")
    @classmethod
    def strip_identifier(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Nilai tidak boleh kosong")
        return value


class PBLAssignmentOut(BaseModel):
    id: str
    course_code: str
    lecturer_id: str
    module_number: int | None = None
    small_group_id: str | None = None

    model_config = {"from_attributes": True}


class CSRAssignmentOut(BaseModel):
    id: str
    course_code: str
    lecturer_id: str
    category: CSRCategory

    model_config = {"from_attributes": True}


class LecturerAssignmentsOut(BaseModel):
    lecturer_id: str
    name: str
    pbl_assignment_count: int
    csr_assignment_count: int

    model_config = {"from_attributes": True}
