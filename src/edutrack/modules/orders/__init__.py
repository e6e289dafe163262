"""Orders module - checkout, Paystack payment and fulfilment of material orders."""
