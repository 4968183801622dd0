"""
Script for creating a new user. For dev/test purposes only.

.. warning: DO NOT USE THIS ON A PRODUCTION DATABASE.

"""

import click

from storefront import domain
from storefront.factory import create_web_app
from storefront.services import catalog, database, users
from storefront.services.exceptions import EmailAlreadyExists


@click.command()
@click.option('--email', prompt='Your email address')
@click.option('--password', prompt='Your password', hide_input=True,
              confirmation_prompt=True)
@click.option('--name', prompt='Your name')
@click.option('--phone', default='')
@click.option('--admin', is_flag=True, default=False,
              help='Give the user the ADMIN role.')
@click.option('--store', 'store_name', default='',
              help='Also create a store with this name, owned by the user.')
def create_user(email: str, password: str, name: str, phone: str = '',
                admin: bool = False, store_name: str = '') -> None:
    """Create a new, verified user. For dev/test purposes only."""
    app = create_web_app()
    with app.app_context():
        database.create_all()
        role = domain.Role.ADMIN if admin else domain.Role.CUSTOMER
        try:
            user, _ = users.register(email, password, name=name, phone=phone,
                                     role=role, verified=True)
        except EmailAlreadyExists:
            raise click.ClickException(f'{email} is already in use')
        click.echo(f'Created {role.value} {user.email} with id {user.id}')

        if store_name:
            store = catalog.create_store(user.id, store_name)
            click.echo(f'Created store "{store.name}" with id {store.id}')


if __name__ == '__main__':
    create_user()
