from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TranslateRequest(_AliasedModel):
    text: str = Field(min_length=1, max_length=20_000)
    source_language: str = Field(alias="sourceLanguage", min_length=1, max_length=20)
    target_language: str = Field(alias="targetLanguage", min_length=1, max_length=20)


class TranslateOut(_AliasedModel):
    original_text: str = Field(alias="originalText")
    translated_text: str = Field(alias="translatedText")
    source_language: str = Field(alias="sourceLanguage")
    target_language: str = Field(alias="targetLanguage")


class DetectLanguageRequest(_AliasedModel):
    text: str = Field(min_length=1, max_length=20_000)


class DetectLanguageOut(_AliasedModel):
    text: str
    detected_language: str = Field(alias="detectedLanguage")


class LanguageOut(_AliasedModel):
    code: str
    name: str


class BatchTranslateRequest(_AliasedModel):
    texts: list[str] = Field(min_length=1, max_length=50)
    source_language: str = Field(alias="sourceLanguage", min_length=1, max_length=20)
    target_language: str = Field(alias="targetLanguage", min_length=1, max_length=20)


class BatchTranslateOut(_AliasedModel):
    translations: list[str]
    source_language: str = Field(alias="sourceLanguage")
    target_language: str = Field(alias="targetLanguage")


class EquationParseRequest(_AliasedModel):
    equation: str = Field(min_length=1, max_length=5_000)
    input_format: str = Field(default="text", alias="inputFormat")


class EquationParseOut(_AliasedModel):
    parsed: str
    input_format: str = Field(alias="inputFormat")


class _FormatPair(_AliasedModel):
    source_format: str = Field(alias="sourceFormat", min_length=1)
    target_format: str = Field(alias="targetFormat", min_length=1)

    @model_validator(mode="after")
    def validate_distinct_formats(self):
        if self.source_format == self.target_format:
            raise ValueError("Source and target formats must be different")
        return self


class EquationConvertRequest(_FormatPair):
    equation: str = Field(min_length=1, max_length=5_000)


class EquationConvertOut(_AliasedModel):
    original_equation: str = Field(alias="originalEquation")
    converted_equation: str = Field(alias="convertedEquation")
    source_format: str = Field(alias="sourceFormat")
    target_format: str = Field(alias="targetFormat")


class EquationBatchConvertRequest(_FormatPair):
    equations: list[str] = Field(min_length=1, max_length=100)


class EquationBatchConvertOut(_AliasedModel):
    converted_equations: str = Field(alias="convertedEquations")
    source_format: str = Field(alias="sourceFormat")
    target_format: str = Field(alias="targetFormat")
    count: int


class EquationSolveRequest(_AliasedModel):
    equation: str = Field(min_length=1, max_length=5_000)
    solve_for: str | None = Field(default=None, alias="solveFor")
    show_steps: bool = Field(default=True, alias="showSteps")


class EquationSolveOut(_AliasedModel):
    equation: str
    solution: str
    solve_for: str | None = Field(default=None, alias="solveFor")
    show_steps: bool = Field(alias="showSteps")


class EquationSimplifyRequest(_AliasedModel):
    equation: str = Field(min_length=1, max_length=5_000)
    show_steps: bool = Field(default=True, alias="showSteps")


class EquationSimplifyOut(_AliasedModel):
    original_equation: str = Field(alias="originalEquation")
    simplified_equation: str = Field(alias="simplifiedEquation")
    show_steps: bool = Field(alias="showSteps")


class EquationValidateRequest(_AliasedModel):
    equation: str = Field(min_length=1, max_length=5_000)
    format: str = "latex"


class EquationValidateOut(_AliasedModel):
    equation: str
    format: str
    validation: str
