from .arithmetic import OPERATORS, Operator, format_operand, generate, operand_range

__all__ = ["OPERATORS", "Operator", "format_operand", "generate", "operand_range"]
