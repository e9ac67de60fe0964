from __future__ import annotations

from cardscan.domain.pipeline.models import ExtractedRecord, SeedFields


def build_completion_prompt(ocr_text: str, seeds: SeedFields) -> str:
    return (
        "You are an expert data extraction specialist. You are given the OCR output from an ID card "
        "and the fields extracted so far.\n"
        "Use the OCR output to fill in any missing fields. If a field already has a value, do not change it. "
        "Only fill in missing information.\n\n"
        "OCR OUTPUT:\n" + ocr_text + "\n\n"
        "EXTRACTED FIELDS:\n"
        f"Surname: {seeds.surname or ''}\n"
        f"First Name: {seeds.first_name or ''}\n"
        f"Gender: {seeds.gender or ''}\n"
        f"Date of Birth: {seeds.date_of_birth or ''}\n"
        f"ID Number: {seeds.id_number or ''}\n\n"
        "Return all five fields, even those that were already present. The gender must be exactly M or F. "
        "The date of birth must follow the YYYY-MM-DD format. "
        "Output ONLY a compact JSON object with the keys "
        '"surname", "firstName", "gender", "dateOfBirth", "idNumber". No extra commentary.'
        "\n\nRESPONSE JSON EXAMPLE:\n"
        '{"surname":"Doe","firstName":"John","gender":"M","dateOfBirth":"1990-01-01","idNumber":"ID123"}'
    )


def build_validation_prompt(record: ExtractedRecord) -> str:
    return (
        "You are an expert in data validation and identity verification. Validate the information "
        "extracted from an ID card and identify any potential errors or inconsistencies.\n\n"
        "EXTRACTED DATA:\n"
        f"- Surname: {record.surname}\n"
        f"- First Name: {record.first_name}\n"
        f"- Gender: {record.gender}\n"
        f"- Date of Birth: {record.date_of_birth}\n"
        f"- ID Number: {record.id_number}\n\n"
        "Summarize your validation results. Highlight any potentially incorrect or inconsistent "
        "information. Be concise and clear. "
        'Output ONLY a compact JSON object with a single key "validationResult" holding the summary.'
        "\n\nRESPONSE JSON EXAMPLE:\n"
        '{"validationResult":"All fields look consistent."}'
    )
