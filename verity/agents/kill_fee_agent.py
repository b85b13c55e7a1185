import logging

from verity.schemas.tools import (
    CompletionStage,
    Industry,
    KillFeeBreakdown,
    KillFeeRequest,
    KillFeeResult,
)

logger = logging.getLogger(__name__)

# Overhead and upfront investment differ by industry
INDUSTRY_MULTIPLIERS = {
    Industry.SOFTWARE: (1.0, "Software Development"),
    Industry.GRAPHIC_DESIGN: (1.1, "Graphic Design"),
    Industry.CONTENT_WRITING: (0.9, "Content Writing"),
    Industry.PHOTOGRAPHY_VIDEO: (1.2, "Photography/Video"),
    Industry.UIUX_DESIGN: (1.1, "UI/UX Design"),
    Industry.CONSULTING: (1.0, "Consulting"),
}

# stage -> (share of work done, opportunity cost on the remainder, label)
COMPLETION_FACTORS = {
    CompletionStage.NOT_STARTED: (0.0, 0.15, "Not yet started"),
    CompletionStage.QUARTER: (0.25, 0.15, "~25% complete"),
    CompletionStage.HALF: (0.50, 0.15, "~50% complete"),
    CompletionStage.THREE_QUARTER: (0.75, 0.15, "~75% complete"),
    CompletionStage.NEAR_COMPLETE: (0.90, 0.10, "Nearly complete (90%+)"),
}

CANCELLATION_FEE_SHARE = 0.15

LEGAL_BASIS = (
    "Fateh Chand v. Balkishan Dass (1963) AIR SC 1405 - The Supreme Court held that compensation "
    "must reflect actual loss suffered and opportunity cost, not be punitive."
)


def format_inr(amount: float) -> str:
    """Format rupees with Indian digit grouping, e.g. ₹1,50,000."""
    digits = str(int(round(amount)))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"₹{digits}"


class KillFeeAgent:
    """Agent for computing a fair kill fee for a cancelled project."""

    def calculate(self, request: KillFeeRequest) -> KillFeeResult:
        """Calculate the kill fee owed at the given completion stage.

        The fee is the value of work done plus an opportunity cost on the
        unfinished remainder, adjusted for the industry.

        Args:
            request: Project value, industry and completion stage

        Returns:
            Kill fee, its breakdown and a generated contract clause
        """
        multiplier, industry_label = INDUSTRY_MULTIPLIERS[request.industry]
        work_done, opportunity_rate, stage_label = COMPLETION_FACTORS[request.completion_stage]

        work_completed_value = request.project_value * work_done
        opportunity_cost = (request.project_value - work_completed_value) * opportunity_rate
        base_total = work_completed_value + opportunity_cost
        industry_adjustment = base_total * (multiplier - 1)
        kill_fee = base_total + industry_adjustment
        percentage = kill_fee / request.project_value * 100

        logger.info(f"Kill fee {kill_fee:.0f} ({percentage:.1f}%) for {industry_label}, {stage_label}")

        return KillFeeResult(
            kill_fee=round(kill_fee),
            percentage=round(percentage, 1),
            breakdown=KillFeeBreakdown(
                work_completed_value=round(work_completed_value),
                opportunity_cost=round(opportunity_cost),
                industry_adjustment=round(industry_adjustment),
            ),
            generated_clause=self.generate_clause(request.project_value, kill_fee, percentage),
            legal_basis=LEGAL_BASIS,
        )

    @staticmethod
    def generate_clause(project_value: float, kill_fee: float, percentage: float) -> str:
        fee = format_inr(kill_fee)
        cancellation_fee = format_inr(project_value * CANCELLATION_FEE_SHARE)
        return f"""TERMINATION AND KILL FEE CLAUSE

In the event of termination of this Agreement by the Client without cause:

(a) If terminated before commencement of work: Client shall pay Contractor 15% of the total project value ({cancellation_fee}) as cancellation fee within 7 days of termination notice.

(b) If terminated after commencement: Client shall pay Contractor the greater of:
    (i) The proportionate value of work completed, PLUS 15% of the remaining contract value as opportunity cost; or
    (ii) {percentage:.1f}% of the total project value ({fee})

(c) Payment shall be made within 7 (seven) business days of termination notice.

(d) All completed work product shall be delivered upon receipt of kill fee payment.

Total Project Value: {format_inr(project_value)}
Calculated Kill Fee: {fee} ({percentage:.1f}%)

Legal Basis: This clause reflects the principle of reasonable compensation established in Fateh Chand v. Balkishan Dass (1963) AIR SC 1405, where the Supreme Court held that compensation must reflect actual loss and opportunity cost."""
