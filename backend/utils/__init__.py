from .money import to_money, sum_money

__all__ = ['to_money', 'sum_money']
