"""Customer self-registration — command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from tianguis.domain import tianguis
from tianguis.identity.account import Role, UserAccount, find_account_by_email


@tianguis.command(part_of=UserAccount)
class RegisterCustomer:
    email = String(required=True, max_length=254)
    name = String(required=True, max_length=150)
    password = String(required=True, max_length=128)


@tianguis.command_handler(part_of=UserAccount)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        if find_account_by_email(command.email) is not None:
            raise ValidationError({"email": ["An account with this email already exists"]})

        account = UserAccount.register(
            email=command.email,
            name=command.name,
            password=command.password,
            role=Role.CUSTOMER.value,
        )
        current_domain.repository_for(UserAccount).add(account)
        return str(account.id)
