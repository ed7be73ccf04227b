SCHEMA_SQL = r"""
-- Products (one row per SKU)
CREATE TABLE IF NOT EXISTS products (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  type TEXT NOT NULL,                    -- clothing / cap
  color TEXT,
  size TEXT,
  unit_cost REAL NOT NULL DEFAULT 0,
  price_suggested REAL NOT NULL DEFAULT 0,
  active INTEGER NOT NULL DEFAULT 1
);

-- Stock on hand (exactly one row per product)
CREATE TABLE IF NOT EXISTS inventory (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_id INTEGER NOT NULL,
  qty_on_hand INTEGER NOT NULL DEFAULT 0,
  FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE CASCADE
);

-- Sales (returns are sales with negative qty)
CREATE TABLE IF NOT EXISTS sales (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  product_id INTEGER NOT NULL,
  qty INTEGER NOT NULL,
  sale_price REAL NOT NULL,
  channel TEXT,                          -- Walk-in / Shopee / Lazada / ...
  payment_method TEXT,                   -- Cash / GCash / Card
  fee REAL DEFAULT 0,
  date TEXT NOT NULL,                    -- ISO datetime
  note TEXT,
  FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE CASCADE
);

-- Expenses (no inventory effect)
CREATE TABLE IF NOT EXISTS expenses (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  category TEXT NOT NULL,
  amount REAL NOT NULL,
  payment_method TEXT,
  fee REAL DEFAULT 0,
  date TEXT NOT NULL,                    -- ISO datetime
  supplier TEXT,
  note TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_inventory_product ON inventory(product_id);
CREATE INDEX IF NOT EXISTS idx_sales_date ON sales(date);
CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);
CREATE INDEX IF NOT EXISTS idx_products_active ON products(active);
"""
