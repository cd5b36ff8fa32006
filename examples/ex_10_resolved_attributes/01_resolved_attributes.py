"""Attribute injection with the ``Resolved`` descriptor.

The attribute type comes from the class annotation. The first access resolves
the dependency and stores it on the instance; later reads are plain attribute
lookups.
"""

from __future__ import annotations

from diregistry import DependencyContainer, Resolved

container = DependencyContainer()


class PaymentGateway:
    def charge(self, amount: int) -> str:
        return f"charged {amount}"


class AuditLog:
    pass


class CheckoutService:
    gateway: PaymentGateway = Resolved(container=container)
    audit: AuditLog = Resolved(container=container, default=None)

    def checkout(self, amount: int) -> str:
        return self.gateway.charge(amount)


def main() -> None:
    container.register(PaymentGateway)

    service = CheckoutService()
    print(service.checkout(10))  # => charged 10

    stored = "gateway" in vars(service)
    print(f"stored_on_instance={stored}")  # => stored_on_instance=True
    print(f"audit={service.audit}")  # => audit=None


if __name__ == "__main__":
    main()
