from fastapi import APIRouter

from geosoft.core.exceptions import AIServiceError
from geosoft.models.user import AppSource
from geosoft.schemas.docxiq import (
    BatchTranslateOut,
    BatchTranslateRequest,
    DetectLanguageOut,
    DetectLanguageRequest,
    EquationBatchConvertOut,
    EquationBatchConvertRequest,
    EquationConvertOut,
    EquationConvertRequest,
    EquationParseOut,
    EquationParseRequest,
    EquationSimplifyOut,
    EquationSimplifyRequest,
    EquationSolveOut,
    EquationSolveRequest,
    EquationValidateOut,
    EquationValidateRequest,
    LanguageOut,
    TranslateOut,
    TranslateRequest,
)
from geosoft.services import equations, gemini, translation
from geosoft.services.prompts import get_app_api_key

router = APIRouter()


def _ask(prompt: str, failure: str) -> str:
    text = gemini.generate_text(prompt, api_key=get_app_api_key(AppSource.docxiq))
    if not text:
        raise AIServiceError(failure)
    return text.strip()


@router.post("/language/translate", response_model=TranslateOut)
def translate_text(payload: TranslateRequest) -> TranslateOut:
    translated = translation.translate(
        payload.text,
        payload.source_language,
        payload.target_language,
        api_key=get_app_api_key(AppSource.docxiq),
    )
    return TranslateOut(
        originalText=payload.text,
        translatedText=translated,
        sourceLanguage=payload.source_language,
        targetLanguage=payload.target_language,
    )


@router.post("/language/detect-language", response_model=DetectLanguageOut)
def detect_language(payload: DetectLanguageRequest) -> DetectLanguageOut:
    detected = translation.detect_language(payload.text, api_key=get_app_api_key(AppSource.docxiq))
    return DetectLanguageOut(text=payload.text, detectedLanguage=detected)


@router.get("/language/languages", response_model=list[LanguageOut])
def list_languages() -> list[LanguageOut]:
    return [LanguageOut(**item) for item in translation.get_supported_languages()]


@router.post("/language/batch-translate", response_model=BatchTranslateOut)
def batch_translate(payload: BatchTranslateRequest) -> BatchTranslateOut:
    api_key = get_app_api_key(AppSource.docxiq)
    translations = [
        translation.translate(text, payload.source_language, payload.target_language, api_key=api_key)
        for text in payload.texts
    ]
    return BatchTranslateOut(
        translations=translations,
        sourceLanguage=payload.source_language,
        targetLanguage=payload.target_language,
    )


@router.post("/equation/parse", response_model=EquationParseOut)
def parse_equation(payload: EquationParseRequest) -> EquationParseOut:
    parsed = _ask(equations.parse_prompt(payload.equation, payload.input_format), "Failed to parse equation")
    return EquationParseOut(parsed=parsed, inputFormat=payload.input_format)


@router.post("/equation/convert", response_model=EquationConvertOut)
def convert_equation(payload: EquationConvertRequest) -> EquationConvertOut:
    converted = _ask(
        equations.convert_prompt(payload.equation, payload.source_format, payload.target_format),
        "Failed to convert equation",
    )
    return EquationConvertOut(
        originalEquation=payload.equation,
        convertedEquation=converted,
        sourceFormat=payload.source_format,
        targetFormat=payload.target_format,
    )


@router.post("/equation/batch-convert", response_model=EquationBatchConvertOut)
def batch_convert_equations(payload: EquationBatchConvertRequest) -> EquationBatchConvertOut:
    converted = _ask(
        equations.batch_convert_prompt(payload.equations, payload.source_format, payload.target_format),
        "Failed to convert equations",
    )
    return EquationBatchConvertOut(
        convertedEquations=converted,
        sourceFormat=payload.source_format,
        targetFormat=payload.target_format,
        count=len(payload.equations),
    )


@router.post("/equation/solve", response_model=EquationSolveOut)
def solve_equation(payload: EquationSolveRequest) -> EquationSolveOut:
    solution = _ask(
        equations.solve_prompt(payload.equation, payload.solve_for, payload.show_steps),
        "Failed to solve equation",
    )
    return EquationSolveOut(
        equation=payload.equation,
        solution=solution,
        solveFor=payload.solve_for,
        showSteps=payload.show_steps,
    )


@router.post("/equation/simplify", response_model=EquationSimplifyOut)
def simplify_equation(payload: EquationSimplifyRequest) -> EquationSimplifyOut:
    simplified = _ask(
        equations.simplify_prompt(payload.equation, payload.show_steps),
        "Failed to simplify equation",
    )
    return EquationSimplifyOut(
        originalEquation=payload.equation,
        simplifiedEquation=simplified,
        showSteps=payload.show_steps,
    )


@router.post("/equation/validate", response_model=EquationValidateOut)
def validate_equation(payload: EquationValidateRequest) -> EquationValidateOut:
    validation = _ask(
        equations.validate_prompt(payload.equation, payload.format),
        "Failed to validate equation",
    )
    return EquationValidateOut(equation=payload.equation, format=payload.format, validation=validation)
