"""
Offerflow - offer lifecycle engine for investor / startup / advisor deals
"""
