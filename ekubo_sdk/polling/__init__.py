from ekubo_sdk.polling.poller import STOP_ERRORS, STOP_MANUAL, QuotePoller, QuotePollerParams, create_quote_poller

__all__ = ["STOP_ERRORS", "STOP_MANUAL", "QuotePoller", "QuotePollerParams", "create_quote_poller"]
