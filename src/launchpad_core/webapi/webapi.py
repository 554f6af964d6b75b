from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from flask import jsonify
from flask_openapi3 import Info, Tag
from flask_openapi3 import OpenAPI

from launchpad_core.common.errors import LaunchpadError
from launchpad_core.common.math import from_base_units, to_base_units
from launchpad_core.curves.linear import LinearSaleCurve


info = Info(title="Launchpad Sale API", version="1.0.0")
app = OpenAPI(__name__, info=info)


class SaleQuoteRequest(BaseModel):
    target_funding: int = Field(gt=0, description="Settlement amount the sale is denominated against (base units)")
    sale_allocation: int = Field(gt=0, description="Units available through the curve (base units)")
    tokens_sold: int = Field(0, ge=0, description="Units already sold (base units)")
    amount_in: Optional[int] = Field(None, gt=0, description="Settlement amount offered (base units)")
    amount_in_display: Optional[Decimal] = Field(
        None, gt=0, description="Settlement amount offered in whole settlement units; used when amount_in is absent"
    )
    settlement_decimals: int = Field(18, ge=0, le=36, description="Decimals of the settlement asset")


sale_quote_tag = Tag(
    name="Sale Quote",
    description="Quote how many units a settlement amount buys at the current point of the sale",
)


@app.post("/sale/quote", summary="Sale Quote", tags=[sale_quote_tag])
def quote(body: SaleQuoteRequest):
    """
    Stateless quote along the sale curve.
    """
    try:
        curve = LinearSaleCurve(body.sale_allocation, body.target_funding)
    except LaunchpadError as e:
        return jsonify({"error": str(e)}), 400
    if body.tokens_sold > body.sale_allocation:
        return jsonify({"error": "tokens_sold exceeds sale_allocation"}), 400

    amount_in = body.amount_in
    if amount_in is None:
        if body.amount_in_display is None:
            return jsonify({"error": "either amount_in or amount_in_display is required"}), 400
        amount_in = to_base_units(body.amount_in_display, body.settlement_decimals)
        if amount_in == 0:
            return jsonify({"error": "amount_in_display is below one base unit"}), 400

    units_out = curve.quote(amount_in, body.tokens_sold)
    return jsonify({
        "amount_in": str(amount_in),
        "units_out": str(units_out),
        "current_price": str(curve.get_spot_price(body.tokens_sold)),
        "exceeds_allocation": body.tokens_sold + units_out > body.sale_allocation,
    })


class SaleStatusRequest(BaseModel):
    target_funding: int = Field(gt=0, description="Settlement amount the sale is denominated against (base units)")
    sale_allocation: int = Field(gt=0, description="Units available through the curve (base units)")
    tokens_sold: int = Field(0, ge=0, description="Units already sold (base units)")
    points: int = Field(11, ge=2, le=1000, description="Number of price points to return for plotting")


sale_status_tag = Tag(
    name="Sale Status",
    description="Get the shape of the sale curve for plotting and the price at the given progress",
)


@app.get("/sale/status", summary="Sale Status", tags=[sale_status_tag])
def status(query: SaleStatusRequest):
    """
    Return a representation of the curve which can be plotted visually by the caller.
    Return the current price based on the sold amount specified by the caller.
    """
    try:
        curve = LinearSaleCurve(query.sale_allocation, query.target_funding)
    except LaunchpadError as e:
        return jsonify({"error": str(e)}), 400
    if query.tokens_sold > query.sale_allocation:
        return jsonify({"error": "tokens_sold exceeds sale_allocation"}), 400

    step_count = query.points - 1
    curve_points = []
    for i in range(query.points):
        sold = query.sale_allocation * i // step_count
        curve_points.append({"tokens_sold": str(sold), "price": str(curve.get_spot_price(sold))})

    return jsonify({
        "initial_price": str(curve.initial_price),
        "initial_price_display": str(from_base_units(curve.initial_price, 18)),
        "current_price": str(curve.get_spot_price(query.tokens_sold)),
        "remaining_allocation": str(query.sale_allocation - query.tokens_sold),
        "curve": curve_points,
    })


def main():
    app.run(debug=True)


if __name__ == "__main__":
    main()
