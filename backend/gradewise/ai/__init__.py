# AI Package - OCR and LLM evaluation adapters
from gradewise.ai.evaluator import AnswerEvaluator, EvaluationError, answer_evaluator
from gradewise.ai.study_planner import StudyPlanner, study_planner
from gradewise.ai.performance_analyzer import PerformanceAnalyzer, performance_analyzer
from gradewise.ai.ocr import OCRService, OCRServiceError, ocr_service

__all__ = [
    "AnswerEvaluator",
    "EvaluationError",
    "answer_evaluator",
    "StudyPlanner",
    "study_planner",
    "PerformanceAnalyzer",
    "performance_analyzer",
    "OCRService",
    "OCRServiceError",
    "ocr_service",
]
