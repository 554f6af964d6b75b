from typing import Any, Dict, List

from launchpad_core.common.enums import SettlementSplit
from launchpad_core.common.math import PRECISION
from launchpad_core.common.model import SaleParams
from launchpad_core.curves.linear import LinearSaleCurve
from launchpad_core.sale.allocation import BPS_DENOMINATOR
from launchpad_core.sale.simulation import simulate_purchases


class SaleValidator:
    """
    Validator for a sale configuration before it is deployed.
    Performs:
      1) Param checks (allocation table, target funding, options)
      2) Boundary tests (price at both ends of the curve, zero quotes, monotonicity)
      3) Scenario tests (a couple of buys on a throwaway in-memory sale)

    Each step returns a dict with:
      {
        "errors": [str...],
        "warnings": [str...],
        "info": {...}
      }
    and 'run_all_validations' aggregates them into a single result.
    """

    @staticmethod
    def validate_params(params: 'SaleParams', options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Checks the parts of a configuration that construct fine but cannot finalize or price well:
          - liquidity allocation > 0
          - creator share of proceeds < 100%
          - initial price does not round to zero
          - the smallest possible order near sell-out does not overshoot the last units
        Also checks the sale options (deadline_horizon > 0, early finalization).
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        allocation = params.allocation
        if allocation.liquidity == 0:
            errors.append("Sale: 'liquidity' allocation is zero; finalize can never deploy liquidity.")
        if allocation.creator_settlement_bps >= BPS_DENOMINATOR:
            errors.append("Sale: creator takes all proceeds; nothing is left for the liquidity venue.")
        if params.target_funding * PRECISION // allocation.sale == 0:
            errors.append("Sale: initial price rounds to zero; raise target_funding or lower the sale allocation.")
        else:
            # Orders are filled whole or not at all, so a remainder smaller than the
            # cheapest possible order near the end of the curve can never be bought.
            curve = LinearSaleCurve(allocation.sale, params.target_funding)
            min_order_units = curve.quote(1, allocation.sale - 1)
            info["min_order_units_at_end"] = str(min_order_units)
            if min_order_units > 1:
                message = (
                    f"Sale: near sell-out one base unit of settlement buys {min_order_units} units; a remainder "
                    f"below that cannot be bought and funding may never complete."
                )
                if options.get("require_funding_complete", True):
                    message += " Finalize would stay blocked."
                warnings.append(message)
        if allocation.sale * 10 < allocation.total_supply:
            warnings.append("Sale: less than 10% of the supply is sold through the curve.")

        deadline_horizon = options.get("deadline_horizon", 300)
        if deadline_horizon <= 0:
            errors.append("Sale: 'deadline_horizon' must be positive.")
        if options.get("require_funding_complete", True) is False:
            warnings.append("Sale: finalize is allowed before the sale allocation is sold out.")

        info["param_summary"] = {
            "target_funding": str(params.target_funding),
            "total_supply": str(allocation.total_supply),
            "sale": str(allocation.sale),
            "creator": str(allocation.creator),
            "liquidity": str(allocation.liquidity),
            "platform_fee": str(allocation.platform_fee),
            "creator_settlement_bps": str(allocation.creator_settlement_bps),
            "settlement_split": str(options.get("settlement_split", SettlementSplit.BALANCE)),
        }

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def boundary_tests(curve: 'LinearSaleCurve') -> Dict[str, Any]:
        """
        Checks the curve:
          - spot price with nothing sold equals the initial price
          - spot price with everything sold is exactly twice the initial price
          - quote(0) is 0
          - the same order buys fewer units the further the sale has progressed
        Also records how far quote() is from the exact integral for one large order.
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        allocation = curve.sale_allocation
        initial = curve.initial_price

        if curve.get_spot_price(0) != initial:
            errors.append(f"Spot price at 0 sold is {curve.get_spot_price(0)}, expected {initial}.")
        if curve.get_spot_price(allocation) != 2 * initial:
            errors.append(
                f"Spot price at full allocation is {curve.get_spot_price(allocation)}, expected {2 * initial}."
            )
        if curve.quote(0, 0) != 0:
            errors.append("Quote for 0 settlement is not zero.")

        order = max(1, curve.target_funding // 1000)
        previous = None
        for sold in (0, allocation // 4, allocation // 2, 3 * allocation // 4):
            units = curve.quote(order, sold)
            if previous is not None and units > previous:
                errors.append(f"Quote for {order} increased from {previous} to {units} at {sold} sold.")
            previous = units

        large_order = curve.target_funding // 2
        if large_order > 0:
            approx = curve.quote(large_order, 0)
            exact = curve.exact_quote(large_order, 0)
            gap = exact - approx
            info["approximation_gap_units"] = str(gap)
            if exact and abs(gap) * 100 > exact:
                warnings.append(
                    f"An order of half the target funding gets {approx} units instead of {exact} "
                    f"under the exact integral."
                )

        info["boundary_tests_run"] = True
        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def scenario_tests(params: 'SaleParams', options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Runs a small scenario on a throwaway sale:
          1) buy(target / 100)
          2) buy(target / 10)
        Checks the allocation is never overshot and the price never falls.
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}

        amounts = [max(1, params.target_funding // 100), max(1, params.target_funding // 10)]
        try:
            result = simulate_purchases(params, amounts, **options)
            if result.final_tokens_sold > params.allocation.sale:
                errors.append("Tokens sold exceed the sale allocation after the scenario.")
            prices = [t.price_after for t in result.transactions]
            if any(later < earlier for earlier, later in zip(prices, prices[1:])):
                errors.append("Price decreased between purchases.")
            if result.metadata["rejected"]:
                warnings.append(f"Scenario orders rejected: {result.metadata['rejected']}")
            info["tokens_sold_after_scenario"] = str(result.final_tokens_sold)
        except Exception as e:
            errors.append(f"Exception in scenario: {e}")

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def run_all_validations(params: 'SaleParams', options: Dict[str, Any] = None) -> Dict[str, Any]:
        """
        Aggregates:
          - param check
          - boundary tests
          - scenario tests
        Returns a dict with keys: errors, warnings, info
        """
        options = options or {}
        results = {
            "errors": [],
            "warnings": [],
            "info": {}
        }

        # 1) Param checks
        param_check = SaleValidator.validate_params(params, options)
        results["errors"].extend(param_check["errors"])
        results["warnings"].extend(param_check["warnings"])
        results["info"].update(param_check["info"])
        if param_check["errors"]:
            return results

        # 2) Boundary tests
        curve = LinearSaleCurve(params.allocation.sale, params.target_funding)
        boundary = SaleValidator.boundary_tests(curve)
        results["errors"].extend(boundary["errors"])
        results["warnings"].extend(boundary["warnings"])
        results["info"].update(boundary["info"])

        # 3) Scenario tests
        scenario = SaleValidator.scenario_tests(params, options)
        results["errors"].extend(scenario["errors"])
        results["warnings"].extend(scenario["warnings"])
        results["info"].update(scenario["info"])

        return results
