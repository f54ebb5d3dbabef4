from typing import Optional
from domain.urgency_calculator import UrgencyResult
from domain.recommendation_engine import RecommendationResult

class ExplanationGenerator:
    """
    Generates customer-facing text for an assessed inspection item.
    """

    @staticmethod
    def generate(
        component_name: str,
        urgency: UrgencyResult,
        recommendations: Optional[RecommendationResult] = None
    ) -> str:
        """
        Generate a short explanation of an item's urgency and the recommended work.
        """
        # 1. Urgency summary
        explanation = f"{component_name} was rated {urgency.level.value} urgency ({urgency.score}/100)."

        # 2. Top reasons, skipping the plain condition factor
        reasons = [f for f in urgency.factors if not f.startswith("Condition:")]
        if reasons:
            explanation += f" Contributing factors: {', '.join(reasons[:3])}."

        # 3. Recommended work
        if recommendations:
            primary = recommendations.primary
            explanation += f" {primary.description}"
            if primary.timeframe:
                explanation += f" Recommended timeframe: {primary.timeframe.lower()}."
            if primary.estimated_cost:
                explanation += f" Estimated cost: ${primary.estimated_cost.total:,.2f}."

            if recommendations.secondary:
                explanation += f" ({len(recommendations.secondary)} additional notes available)"

        return explanation
