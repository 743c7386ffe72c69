# Per-lot valuation: current value, cost basis and gain/loss

from portfolio_tracker.models import InvestmentLot, LotPerformance


def lot_value(lot: InvestmentLot) -> float:
    """Market value of a lot, falling back to the purchase price when no current price is known."""
    price: float = lot.current_price if lot.current_price is not None else lot.purchase_price
    return lot.quantity * price


def cost_basis(lot: InvestmentLot) -> float:
    return lot.total_cost


def gain_loss(lot: InvestmentLot) -> float:
    return lot_value(lot) - cost_basis(lot)


def gain_loss_percent(lot: InvestmentLot) -> float | None:
    """Gain/loss as a percentage of cost basis, or None when the cost basis is not positive."""
    basis: float = cost_basis(lot)
    if basis <= 0:
        return None
    return gain_loss(lot) / basis * 100


def lot_performance(lot: InvestmentLot) -> LotPerformance:
    return LotPerformance(
        lot_id=lot.id,
        asset_name=lot.asset_name,
        value=lot_value(lot),
        cost_basis=cost_basis(lot),
        gain_loss=gain_loss(lot),
        gain_loss_percent=gain_loss_percent(lot),
    )
