"""Mixed storefront workload.

Shoppers far outnumber merchandisers; most carts are abandoned. This is
the recommended scenario for a baseline.
"""

from locust import HttpUser, between

from loadtests.scenarios.back_office import CatalogueStockingJourney, CouponCampaignJourney
from loadtests.scenarios.storefront import AbandonedCartJourney, BrowseAndCheckoutJourney


class MixedWorkloadUser(HttpUser):
    wait_time = between(0.5, 3.0)
    tasks = {
        AbandonedCartJourney: 10,
        BrowseAndCheckoutJourney: 6,
        CatalogueStockingJourney: 2,
        CouponCampaignJourney: 1,
    }


class MerchandiserUser(HttpUser):
    """Catalogue writes only; run first to seed an empty store."""

    wait_time = between(0.2, 1.0)
    tasks = [CatalogueStockingJourney]
