"""KTU BizConnect: BFF du retour de paiement (vérification passerelle -> commandes)."""
