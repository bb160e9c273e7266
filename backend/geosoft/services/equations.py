"""Prompt builders for the DocxIQ equation tools."""

from __future__ import annotations

FORMAT_NAMES = {
    "latex": "LaTeX",
    "mathml": "MathML",
    "asciimath": "AsciiMath",
    "unicode": "Unicode Math",
    "plaintext": "Plain Text",
}


def format_name(value: str) -> str:
    return FORMAT_NAMES.get(value, value)


def parse_prompt(equation: str, input_format: str) -> str:
    return f"""Parse and analyze the following mathematical equation:

Input Format: {input_format}
Equation: {equation}

Please provide:
1. The equation in standard mathematical notation
2. Identify all variables and constants
3. Equation type (linear, quadratic, differential, etc.)
4. Any special mathematical functions or operators used

Format your response as JSON with: notation, variables, constants, type, functions"""


def convert_prompt(equation: str, source_format: str, target_format: str) -> str:
    source, target = format_name(source_format), format_name(target_format)
    return f"""Convert the following mathematical equation from {source} format to {target} format.

Source Format: {source}
Equation: {equation}

Please provide ONLY the converted equation in {target} format, nothing else."""


def batch_convert_prompt(equations: list[str], source_format: str, target_format: str) -> str:
    source, target = format_name(source_format), format_name(target_format)
    numbered = "\n".join(f"{index}. {equation}" for index, equation in enumerate(equations, start=1))
    return f"""Convert the following mathematical equations from {source} format to {target} format.

Source Format: {source}
Equations:
{numbered}

Please convert each equation to {target} format. Maintain the same order. Output ONLY the converted equations, one per line, with no additional text or explanations."""


def solve_prompt(equation: str, solve_for: str | None, show_steps: bool) -> str:
    prompt = f"Solve the following mathematical equation:\n\nEquation: {equation}"
    if solve_for:
        prompt += f"\nSolve for: {solve_for}"
    if show_steps:
        prompt += (
            "\n\nPlease provide:\n"
            "1. The solution(s)\n"
            "2. Step-by-step working\n"
            "3. Verification of the solution(s)\n"
            "4. Any special conditions or constraints"
        )
    else:
        prompt += "\n\nProvide only the final solution(s)."
    return prompt


def simplify_prompt(equation: str, show_steps: bool) -> str:
    tail = (
        "Please show all simplification steps and explain each transformation."
        if show_steps
        else "Provide only the simplified form."
    )
    return f"Simplify the following mathematical equation or expression:\n\nEquation: {equation}\n\n{tail}"


def validate_prompt(equation: str, equation_format: str) -> str:
    return f"""Validate the syntax of the following mathematical equation in {format_name(equation_format)} format:

Equation: {equation}

Please provide:
1. Is the syntax valid? (yes/no)
2. If invalid, list all syntax errors
3. Suggestions for correction
4. The corrected equation (if applicable)

Format your response as JSON with: isValid, errors, suggestions, correctedEquation"""
