"""Generate synthetic data for testing and development purposes."""

import random
from decimal import Decimal

import click
from mimesis import Address, Finance, Internet, Person, Text
from mimesis.locales import Locale

from storefront import domain
from storefront.factory import create_web_app
from storefront.services import accounts, catalog, database, users
from storefront.services.database import transaction
from storefront.services.models import DBOrder, DBOrderItem

SIZES = [('Small', 'S'), ('Medium', 'M'), ('Large', 'L'),
         ('Extra Large', 'XL')]
PASSWORD = 'password123'


def _prob(P: int) -> bool:
    return random.randint(0, 100) < P


@click.command()
@click.option('--products', default=40, help='Number of products.')
@click.option('--customers', default=25, help='Number of customers.')
@click.option('--locale', default='en', help='mimesis locale code.')
@click.option('--reset', is_flag=True, default=False,
              help='Drop all tables before seeding.')
def generate(products: int, customers: int, locale: str,
             reset: bool = False) -> None:
    """Seed a demo store, its catalog and some customers."""
    loc = Locale(locale)
    person = Person(loc)
    text = Text(loc)
    net = Internet()
    finance = Finance(loc)
    address = Address(loc)

    app = create_web_app()
    with app.app_context():
        if reset:
            database.drop_all()
        database.create_all()

        owner, _ = users.register(person.email(unique=True), PASSWORD,
                                  name=person.full_name(),
                                  role=domain.Role.ADMIN, verified=True)
        store = catalog.create_store(owner.id, f'{person.last_name()} & Co.')
        click.echo(f'Store {store.id}, owned by {owner.email}')
        if not app.config['STORE_ID']:
            click.echo(f'Set STORE_ID={store.id} to bind the storefront')

        billboards = [
            catalog.create_resource('billboards', store.id,
                                    label=text.title(), image_url=net.url())
            for _ in range(3)
        ]
        categories = [
            catalog.create_resource('categories', store.id,
                                    name=text.word().title(),
                                    billboard_id=random.choice(billboards).id)
            for _ in range(4)
        ]
        sizes = [catalog.create_resource('sizes', store.id, name=name,
                                         value=value)
                 for name, value in SIZES]
        colors = [catalog.create_resource('colors', store.id,
                                          name=text.color(),
                                          value=text.hex_color())
                  for _ in range(5)]

        _products = []
        for _ in range(products):
            variants = [{'size_id': size.id,
                         'color_id': random.choice(colors).id,
                         'in_stock': random.randint(0, 50)}
                        for size in random.sample(sizes, k=2)]
            _products.append(catalog.create_product(
                store.id,
                name=' '.join(text.words(quantity=2)).title(),
                price=Decimal(str(finance.price(minimum=5, maximum=300))),
                category_id=random.choice(categories).id,
                description=text.text(quantity=2),
                images=[net.url() for _ in range(random.randint(1, 3))],
                variants=variants,
                is_featured=_prob(20),
                is_archived=_prob(5)
            ))

        for _ in range(customers):
            customer, _ = users.register(person.email(unique=True), PASSWORD,
                                         name=person.full_name(),
                                         phone=person.telephone(),
                                         verified=_prob(90))
            accounts.add_address(
                customer.id,
                name=customer.name,
                line1=address.address(),
                city=address.city(),
                state=address.state(),
                postal_code=address.postal_code(),
                country=address.country_code(),
                is_default=True
            )
            for product in random.sample(_products, k=3):
                accounts.add_favorite(customer.id, product.id)
            with transaction() as session:
                for _ in range(random.randint(0, 6)):
                    session.add(DBOrder(
                        store_id=store.id,
                        user_id=customer.id,
                        is_paid=_prob(70),
                        is_sent=_prob(40),
                        phone=customer.phone or '',
                        address=address.address(),
                        items=[DBOrderItem(product_id=product.id) for product
                               in random.sample(_products, k=2)]
                    ))
        click.echo(f'Created {products} products and {customers} customers;'
                   f' every password is "{PASSWORD}"')
        click.echo(f"Browse: {app.config['API_BASE_URL'].rstrip('/')}"
                   f"/{store.id}/products")


if __name__ == '__main__':
    generate()
