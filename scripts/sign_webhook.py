"""HMAC signing helper for simulating Shopify webhooks and OAuth callbacks.

Reads a JSON body from stdin and prints the base64 ``X-Shopify-Hmac-Sha256``
value, signed with SHOPIFY_WEBHOOK_SECRET (or SHOPIFY_API_SECRET) from the
environment or .env file. With ``--query`` it instead reads ``key=value``
query parameters and prints the hex ``hmac`` Shopify appends to OAuth
redirects.

Usage:
    BODY='{"id":1001,"financial_status":"paid","line_items":[{"sku":"A1","quantity":2}]}'
    HMAC=$(echo -n "$BODY" | python -m scripts.sign_webhook)
    curl -X POST http://localhost:8000/api/webhooks/orders \\
      -H "Content-Type: application/json" \\
      -H "X-Shopify-Topic: orders/updated" \\
      -H "X-Shopify-Hmac-Sha256: $HMAC" \\
      -H "X-Azan-App-Id: $AZAN_APP_ID" \\
      -H "X-Azan-Secret-Key: $AZAN_SECRET_KEY" \\
      -d "$BODY"

    echo -n 'shop=test.myshopify.com&code=abc&state=xyz' | python -m scripts.sign_webhook --query
"""

import sys
from urllib.parse import parse_qsl

from wholesale_bridge.core.config import settings
from wholesale_bridge.integrations.shopify.signatures import sign_body, sign_query


def main() -> None:
    secret = settings.webhook_secret
    if not secret:
        print("ERROR: SHOPIFY_API_SECRET is not set in .env", file=sys.stderr)
        sys.exit(1)

    if "--query" in sys.argv[1:]:
        params = dict(parse_qsl(sys.stdin.read().strip(), keep_blank_values=True))
        print(sign_query(params, settings.shopify_api_secret))
        return

    body = sys.stdin.buffer.read()
    print(sign_body(body, secret))


if __name__ == "__main__":
    main()
