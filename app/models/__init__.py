# Masters
from app.models.masters.product_models import Product

# Users
from app.models.users.user_models import User

# Transaction history
from app.models.sales.sale_models import SaleItem
from app.models.purchases.purchase_models import PurchaseItem
