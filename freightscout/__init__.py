"""FreightScout: freight-quotation clients for Brazilian carriers."""

__version__ = "0.1.0"
